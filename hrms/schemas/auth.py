"""
Authentication schemas.
"""

from pydantic import BaseModel, EmailStr, Field

from .user import UserResponse, UserType


class SessionUser(BaseModel):
    """Identity snapshot returned alongside issued tokens."""
    id: int
    email: EmailStr
    full_name: str
    roles: list[str]
    user_type: UserType


class TokenResponse(BaseModel):
    """Token pair response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: SessionUser


class RefreshTokenRequest(BaseModel):
    """Refresh token request."""
    refresh_token: str


class RegisterRequest(BaseModel):
    """Self sign-up request."""
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1, max_length=255)


class RegisterResponse(BaseModel):
    """Registration response with user and tokens."""
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


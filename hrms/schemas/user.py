"""
User schemas.
"""

from datetime import date, datetime
from pydantic import BaseModel, EmailStr, Field

from hrms.models.user import User
from hrms.services.resolver import UserType, classify_user


class UserResponse(BaseModel):
    """User response schema."""

    id: int
    email: EmailStr
    full_name: str
    phone: str | None = None
    is_active: bool
    roles: list[str]
    user_type: UserType
    created_at: datetime
    last_login_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            phone=user.phone,
            is_active=user.is_active,
            roles=user.role_names,
            user_type=classify_user(user),
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class UserCreate(BaseModel):
    """Administrative user creation."""
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str = Field(min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    roles: list[str] = Field(default_factory=list, description="Role names to assign")
    user_type: UserType = "user"

    # Profile fields, used when user_type is employee or agent
    department: str | None = Field(None, max_length=100)
    date_of_joining: date | None = None
    company: str | None = Field(None, max_length=255)


class UserUpdate(BaseModel):
    """
    User update schema.

    ``roles`` omitted (or null) keeps the current roles; any list,
    including an empty one, replaces them entirely.
    """
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8)
    full_name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    is_active: bool | None = None
    roles: list[str] | None = None


class UserListResponse(BaseModel):
    """Paginated user list response."""
    users: list[UserResponse]
    total: int
    page: int
    per_page: int

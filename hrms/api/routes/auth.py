"""
Authentication routes.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from hrms.schemas.auth import (
    TokenResponse,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    SessionUser,
)
from hrms.schemas.user import UserResponse
from hrms.services.auth import AuthService, TokenPair
from hrms.services.resolver import classify_user
from hrms.api.dependencies.auth import CurrentUser, get_auth_service
from hrms.models.user import User

router = APIRouter()


def _token_response(user: User, tokens: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type="bearer",
        user=SessionUser(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            roles=user.role_names,
            user_type=classify_user(user),
        ),
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user."""
    user, tokens = await auth_service.register(
        email=data.email,
        password=data.password,
        full_name=data.full_name,
    )
    return RegisterResponse(
        user=UserResponse.from_user(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type="bearer",
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login with email and password."""
    result = await auth_service.login(
        email=form_data.username,
        password=form_data.password,
    )
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return _token_response(*result)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Refresh access token."""
    result = await auth_service.refresh_tokens(data.refresh_token)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )
    return _token_response(*result)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get current user profile."""
    return UserResponse.from_user(current_user)

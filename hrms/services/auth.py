"""
Authentication service.

Issues signed access/refresh token pairs. The access token carries a
snapshot of the user's role names and user type for clients; request
authorization always re-resolves permissions from the store.
"""

from datetime import datetime, timedelta, timezone
from dataclasses import dataclass
from typing import Any

import structlog
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.config import settings
from hrms.core.exceptions import ConflictError
from hrms.core.security import verify_password
from hrms.models.user import User
from .resolver import classify_user
from .transaction import write_scope
from .user import UserService

logger = structlog.get_logger()


@dataclass
class TokenPair:
    """Access and refresh token pair."""
    access_token: str
    refresh_token: str


class AuthService:
    """Authentication service."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserService(db)

    def verify_password(self, plain: str, hashed: str) -> bool:
        """Verify password against hash."""
        return verify_password(plain, hashed)

    def _encode(self, payload: dict[str, Any], expires: timedelta) -> str:
        payload = {**payload, "exp": datetime.now(timezone.utc) + expires}
        return jwt.encode(
            payload,
            settings.auth.secret_key,
            algorithm=settings.auth.algorithm,
        )

    def decode_token(self, token: str, expected_type: str = "access") -> dict[str, Any] | None:
        """Decode and verify a token; None if invalid, expired or of the wrong type."""
        try:
            payload = jwt.decode(
                token,
                settings.auth.secret_key,
                algorithms=[settings.auth.algorithm],
            )
        except JWTError:
            return None
        if payload.get("type") != expected_type or not payload.get("sub"):
            return None
        return payload

    def create_access_token(self, user: User) -> str:
        """Create JWT access token with the user's role snapshot."""
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.full_name,
            "roles": user.role_names,
            "user_type": classify_user(user),
            "type": "access",
        }
        return self._encode(
            claims,
            timedelta(minutes=settings.auth.access_token_expire_minutes),
        )

    def create_refresh_token(self, user: User) -> str:
        """Create JWT refresh token."""
        return self._encode(
            {"sub": str(user.id), "type": "refresh"},
            timedelta(days=settings.auth.refresh_token_expire_days),
        )

    def create_tokens(self, user: User) -> TokenPair:
        """Create access and refresh token pair."""
        return TokenPair(
            access_token=self.create_access_token(user),
            refresh_token=self.create_refresh_token(user),
        )

    async def register(
        self,
        email: str,
        password: str,
        full_name: str,
    ) -> tuple[User, TokenPair]:
        """Register a new user with no roles."""
        if await self.users.get_by_email(email):
            raise ConflictError("Email already registered")

        user = await self.users.create_user(
            email=email,
            password=password,
            full_name=full_name,
        )
        logger.info("user_registered", user_id=user.id)

        return user, self.create_tokens(user)

    async def login(self, email: str, password: str) -> tuple[User, TokenPair] | None:
        """
        Authenticate user and return tokens.

        Unknown email, wrong password and inactive account all return None.
        """
        user = await self.users.get_by_email(email)

        if not user or not self.verify_password(password, user.password_hash):
            logger.info("login_failed", email=email)
            return None

        if not user.is_active:
            logger.info("login_failed", email=email, reason="inactive")
            return None

        # Update last login
        async with write_scope(self.db):
            user.last_login_at = datetime.now(timezone.utc)

        user = await self.users.get_user(user.id)
        logger.info("login_succeeded", user_id=user.id, roles=user.role_names)

        return user, self.create_tokens(user)

    async def refresh_tokens(self, refresh_token: str) -> tuple[User, TokenPair] | None:
        """Re-issue a token pair with a fresh role snapshot."""
        payload = self.decode_token(refresh_token, expected_type="refresh")
        if payload is None:
            return None

        user = await self.users.get_by_id(payload["sub"])
        if user is None or not user.is_active:
            return None

        return user, self.create_tokens(user)

"""
User service.
"""

from collections.abc import Iterable
from datetime import date

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hrms.core.config import settings
from hrms.core.exceptions import BadRequestError, ConflictError, NotFoundError
from hrms.core.security import hash_password
from hrms.models.rbac import UserRole
from hrms.models.user import Agent, Employee, User
from hrms.schemas.user import UserUpdate
from .assignment import AssignmentService
from .transaction import write_scope

logger = structlog.get_logger()

USER_TYPES = ("employee", "agent", "user")

REQUIRED_FIELDS = ("email", "full_name", "is_active")


def profile_code(prefix: str, user_id: int) -> str:
    """Profile code derived from the user id, e.g. EMP007."""
    return f"{prefix}{user_id:03d}"


class UserService:
    """User management service."""

    def __init__(self, db: AsyncSession, strict: bool | None = None):
        self.db = db
        self.strict = settings.rbac.strict_name_resolution if strict is None else strict
        self.assignments = AssignmentService(db, strict=self.strict)

    def _loaded(self):
        """User select with roles and profiles loaded fresh."""
        return (
            select(User)
            .options(
                selectinload(User.role_links).selectinload(UserRole.role),
                selectinload(User.employee),
                selectinload(User.agent),
            )
            .execution_options(populate_existing=True)
        )

    def _check_password(self, password: str) -> None:
        if len(password) < settings.auth.password_min_length:
            raise BadRequestError(
                f"Password must be at least {settings.auth.password_min_length} characters"
            )

    async def get_by_id(self, user_id: int | str) -> User | None:
        """Get user by ID."""
        if isinstance(user_id, str):
            if not user_id.isdigit():
                return None
            user_id = int(user_id)
        result = await self.db.execute(self._loaded().where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        result = await self.db.execute(self._loaded().where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user(self, user_id: int) -> User:
        """Get user by ID or raise ``NotFoundError``."""
        user = await self.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list_users(
        self,
        page: int = 1,
        per_page: int = 20,
        search: str | None = None,
    ) -> tuple[list[User], int]:
        """List users with pagination."""
        stmt = self._loaded()

        if search:
            stmt = stmt.where(
                User.email.ilike(f"%{search}%") |
                User.full_name.ilike(f"%{search}%")
            )

        # Count total
        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = await self.db.scalar(count_stmt) or 0

        # Paginate
        stmt = stmt.order_by(User.id).offset((page - 1) * per_page).limit(per_page)
        result = await self.db.execute(stmt)
        users = list(result.scalars().all())

        return users, total

    async def create_user(
        self,
        email: str,
        password: str,
        full_name: str,
        phone: str | None = None,
        role_names: Iterable[str] | None = None,
        user_type: str = "user",
        department: str | None = None,
        date_of_joining: date | None = None,
        company: str | None = None,
    ) -> User:
        """
        Create a user with its initial roles and profile.

        ``user_type`` "employee" or "agent" also creates the matching
        profile, coded from the new user's id. The user, its role
        assignments and its profile are written together or not at all.
        """
        if user_type not in USER_TYPES:
            raise BadRequestError(f"Invalid user type '{user_type}'", allowed=list(USER_TYPES))
        self._check_password(password)

        if await self.db.scalar(select(User.id).where(User.email == email)) is not None:
            raise ConflictError("Email already exists")

        # Resolve before writing so a strict-mode rejection leaves nothing behind
        roles = await self.assignments.resolve_role_names(role_names or [])

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            phone=phone,
        )
        async with write_scope(self.db, conflict="Email already exists"):
            self.db.add(user)
            await self.db.flush()

            if user_type == "employee":
                self.db.add(Employee(
                    user_id=user.id,
                    employee_code=profile_code("EMP", user.id),
                    full_name=full_name,
                    email=email,
                    phone=phone,
                    department=department,
                    date_of_joining=date_of_joining,
                ))
            elif user_type == "agent":
                self.db.add(Agent(
                    user_id=user.id,
                    agent_code=profile_code("AGT", user.id),
                    full_name=full_name,
                    email=email,
                    phone=phone,
                    company=company,
                ))

        user_id = user.id
        await self.assignments.add_roles(user_id, roles)

        logger.info(
            "user_created",
            user_id=user_id,
            user_type=user_type,
            roles=sorted(role.name for role in roles),
        )
        return await self.get_user(user_id)

    async def update_user(self, user_id: int, data: UserUpdate) -> User:
        """
        Update user.

        ``roles`` in ``data`` follows the replace contract: unset or null
        keeps the current roles, any list replaces them.
        """
        user = await self.get_user(user_id)

        update_data = data.model_dump(exclude_unset=True)
        role_names = update_data.pop("roles", None)
        password = update_data.pop("password", None)
        if password:
            self._check_password(password)
        # Null clears optional fields only
        update_data = {
            k: v for k, v in update_data.items()
            if v is not None or k not in REQUIRED_FIELDS
        }

        new_email = update_data.get("email")
        if new_email and new_email != user.email:
            existing = await self.db.scalar(select(User.id).where(User.email == new_email))
            if existing is not None and existing != user_id:
                raise ConflictError("Email already exists")

        # Roles first: a strict-mode rejection must leave the user untouched
        if role_names is not None:
            await self.assignments.replace_user_roles(user_id, role_names)

        async with write_scope(self.db, conflict="Email already exists"):
            for field, value in update_data.items():
                setattr(user, field, value)
            if password:
                user.password_hash = hash_password(password)

        logger.info(
            "user_updated",
            user_id=user_id,
            fields=sorted(update_data) + (["password"] if password else []),
            replaced_roles=role_names is not None,
        )
        return await self.get_user(user_id)

    async def delete_user(self, user_id: int) -> None:
        """
        Delete user.

        Dependents go first: role assignments, then the employee and
        agent profiles, then the user row.
        """
        user = await self.get_user(user_id)
        email = user.email

        async with write_scope(self.db):
            await self.db.execute(delete(UserRole).where(UserRole.user_id == user_id))
            await self.db.execute(delete(Employee).where(Employee.user_id == user_id))
            await self.db.execute(delete(Agent).where(Agent.user_id == user_id))
            await self.db.execute(delete(User).where(User.id == user_id))

        logger.info("user_deleted", user_id=user_id, email=email)

"""
Authorization resolver.

Read-only answers to "what may this user do?", computed from the
user -> role -> permission graph at call time. Nothing is cached, so
every change to assignments or grants is visible on the next query.

Matching is on the exact (resource, action) pair. A "manage" grant is
its own pair and does not imply create/read/update/delete.
"""

from typing import Literal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.exceptions import NotFoundError
from hrms.models.rbac import Permission, Role, RolePermission, UserRole
from hrms.models.user import User

UserType = Literal["employee", "agent", "user"]


def classify_user(user: User) -> UserType:
    """Classify a user by profile: employee beats agent beats plain user."""
    if user.employee is not None:
        return "employee"
    if user.agent is not None:
        return "agent"
    return "user"


class AuthorizationResolver:
    """Resolve effective permissions for users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    classify_user = staticmethod(classify_user)

    async def _require_user(self, user_id: int) -> None:
        if await self.db.scalar(select(User.id).where(User.id == user_id)) is None:
            raise NotFoundError("User not found")

    def _granted(self, user_id: int, *columns):
        """Permissions reachable from the user's roles."""
        return (
            select(*(columns or (Permission,)))
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .where(UserRole.user_id == user_id)
        )

    async def effective_permissions(self, user_id: int) -> list[Permission]:
        """
        Union of the permissions of every role the user holds.

        Each permission appears once even when several roles grant it.
        Ordered by (resource, action).
        """
        await self._require_user(user_id)
        stmt = (
            self._granted(user_id)
            .distinct()
            .order_by(Permission.resource, Permission.action, Permission.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def has_permission(self, user_id: int, resource: str, action: str) -> bool:
        """Whether any of the user's roles grants exactly (resource, action)."""
        await self._require_user(user_id)
        stmt = (
            self._granted(user_id, Permission.id)
            .where(Permission.resource == resource, Permission.action == action)
            .limit(1)
        )
        return await self.db.scalar(stmt) is not None

    async def role_names(self, user_id: int) -> list[str]:
        """Names of the user's roles, ordered by name."""
        result = await self.db.execute(
            select(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.name)
        )
        return list(result.scalars().all())

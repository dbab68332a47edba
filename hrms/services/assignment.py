"""
User-to-role assignment service.
"""

from collections.abc import Iterable

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.config import settings
from hrms.core.exceptions import ConflictError, NotFoundError
from hrms.models.rbac import Role, UserRole
from hrms.models.user import User
from .permission import check_unresolved, dedupe_names
from .transaction import write_scope

logger = structlog.get_logger()


class AssignmentService:
    """Grant and revoke roles for users."""

    def __init__(self, db: AsyncSession, strict: bool | None = None):
        self.db = db
        self.strict = settings.rbac.strict_name_resolution if strict is None else strict

    async def _require_user(self, user_id: int) -> None:
        if await self.db.scalar(select(User.id).where(User.id == user_id)) is None:
            raise NotFoundError("User not found")

    async def _require_role(self, role_id: int) -> None:
        if await self.db.scalar(select(Role.id).where(Role.id == role_id)) is None:
            raise NotFoundError("Role not found")

    async def _held_role_ids(self, user_id: int) -> set[int]:
        result = await self.db.execute(
            select(UserRole.role_id).where(UserRole.user_id == user_id)
        )
        return set(result.scalars().all())

    async def resolve_role_names(self, names: Iterable[str]) -> list[Role]:
        """
        Look up roles by name.

        Unknown names are dropped, or rejected with ``BadRequestError``
        when strict name resolution is enabled.
        """
        wanted = dedupe_names(names)
        if not wanted:
            return []

        result = await self.db.execute(select(Role).where(Role.name.in_(wanted)))
        roles = list(result.scalars().all())
        check_unresolved("role", wanted, (r.name for r in roles), self.strict)
        return roles

    async def assign_role(self, user_id: int, role_id: int) -> UserRole:
        """Assign one role to one user."""
        await self._require_user(user_id)
        await self._require_role(role_id)

        if role_id in await self._held_role_ids(user_id):
            raise ConflictError("User already has this role")

        link = UserRole(user_id=user_id, role_id=role_id)
        async with write_scope(self.db, conflict="User already has this role"):
            self.db.add(link)

        logger.info("role_assigned", user_id=user_id, role_id=role_id)
        return link

    async def remove_role(self, user_id: int, role_id: int) -> int:
        """
        Remove a role from a user.

        Removing an assignment that does not exist is not an error; the
        return value is the number of assignments removed (0 or 1).
        """
        async with write_scope(self.db):
            result = await self.db.execute(
                delete(UserRole).where(
                    UserRole.user_id == user_id,
                    UserRole.role_id == role_id,
                )
            )

        removed = result.rowcount or 0
        logger.info("role_removed", user_id=user_id, role_id=role_id, removed=removed)
        return removed

    async def assign_roles_by_name(
        self,
        user_id: int,
        role_names: Iterable[str],
    ) -> list[Role]:
        """
        Assign roles by name in one write.

        Roles the user already holds are skipped. Returns the roles that
        were newly assigned.
        """
        await self._require_user(user_id)
        roles = await self.resolve_role_names(role_names)
        return await self.add_roles(user_id, roles)

    async def add_roles(self, user_id: int, roles: list[Role]) -> list[Role]:
        """Assign already-resolved roles, skipping any the user holds."""
        held = await self._held_role_ids(user_id)
        new_roles = [role for role in roles if role.id not in held]
        if not new_roles:
            return []

        async with write_scope(self.db, conflict="User already has this role"):
            self.db.add_all(UserRole(user_id=user_id, role_id=role.id) for role in new_roles)

        logger.info(
            "roles_assigned",
            user_id=user_id,
            roles=[role.name for role in new_roles],
        )
        return new_roles

    async def replace_user_roles(
        self,
        user_id: int,
        role_names: Iterable[str],
    ) -> list[Role]:
        """Replace every role the user holds with the named roles."""
        await self._require_user(user_id)
        roles = await self.resolve_role_names(role_names)

        async with write_scope(self.db, conflict="User already has this role"):
            await self.db.execute(delete(UserRole).where(UserRole.user_id == user_id))
            self.db.add_all(UserRole(user_id=user_id, role_id=role.id) for role in roles)

        logger.info(
            "roles_replaced",
            user_id=user_id,
            roles=sorted(role.name for role in roles),
        )
        return roles

    async def list_user_roles(self, user_id: int) -> list[Role]:
        """Roles held by a user, ordered by name."""
        await self._require_user(user_id)
        result = await self.db.execute(
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.name)
        )
        return list(result.scalars().all())

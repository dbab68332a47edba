"""
Permission catalog service.
"""

from collections.abc import Iterable

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.config import settings
from hrms.core.exceptions import BadRequestError, ConflictError, NotFoundError
from hrms.models.rbac import PERMISSION_ACTIONS, Permission, RolePermission
from .transaction import write_scope

logger = structlog.get_logger()


def dedupe_names(names: Iterable[str]) -> list[str]:
    """Strip blanks and duplicates, keeping first-seen order."""
    seen: dict[str, None] = {}
    for name in names:
        name = name.strip()
        if name:
            seen.setdefault(name, None)
    return list(seen)


def check_unresolved(kind: str, requested: list[str], found: Iterable[str], strict: bool) -> None:
    """
    Handle names that matched nothing in the store.

    Lenient mode logs and drops them; strict mode rejects the whole call.
    """
    missing = sorted(set(requested) - set(found))
    if not missing:
        return
    if strict:
        raise BadRequestError(f"Unknown {kind} names", unknown=missing)
    logger.warning("unknown_names_dropped", kind=kind, names=missing)


class PermissionService:
    """Manage the permission catalog."""

    def __init__(self, db: AsyncSession, strict: bool | None = None):
        self.db = db
        self.strict = settings.rbac.strict_name_resolution if strict is None else strict

    async def get_by_name(self, name: str) -> Permission | None:
        result = await self.db.execute(select(Permission).where(Permission.name == name))
        return result.scalar_one_or_none()

    async def get_permission(self, permission_id: int) -> Permission:
        """Get permission by ID or raise ``NotFoundError``."""
        permission = await self.db.get(Permission, permission_id)
        if permission is None:
            raise NotFoundError("Permission not found")
        return permission

    async def list_permissions(
        self,
        group_by_resource: bool = False,
    ) -> list[Permission] | dict[str, list[Permission]]:
        """
        List every permission ordered by (resource, action).

        With ``group_by_resource`` the same ordering is returned as a
        mapping of resource to its permissions.
        """
        stmt = select(Permission).order_by(
            Permission.resource,
            Permission.action,
            Permission.id,
        )
        result = await self.db.execute(stmt)
        permissions = list(result.scalars().all())

        if not group_by_resource:
            return permissions

        grouped: dict[str, list[Permission]] = {}
        for permission in permissions:
            grouped.setdefault(permission.resource, []).append(permission)
        return grouped

    async def create_permission(
        self,
        name: str,
        resource: str,
        action: str,
        description: str | None = None,
    ) -> Permission:
        """Register a new permission; names are unique."""
        name = name.strip()
        resource = resource.strip()
        if not name or not resource:
            raise BadRequestError("Permission name and resource are required")
        if action not in PERMISSION_ACTIONS:
            raise BadRequestError(
                f"Invalid action '{action}'",
                allowed=list(PERMISSION_ACTIONS),
            )

        if await self.get_by_name(name):
            raise ConflictError("Permission name already exists")

        permission = Permission(
            name=name,
            description=description,
            resource=resource,
            action=action,
        )
        async with write_scope(self.db, conflict="Permission name already exists"):
            self.db.add(permission)

        logger.info(
            "permission_created",
            permission_id=permission.id,
            name=name,
            resource=resource,
            action=action,
        )
        return permission

    async def delete_permission(self, permission_id: int) -> None:
        """Delete a permission that no role grants."""
        permission = await self.get_permission(permission_id)

        role_count = await self.db.scalar(
            select(func.count())
            .select_from(RolePermission)
            .where(RolePermission.permission_id == permission_id)
        ) or 0
        if role_count:
            raise ConflictError(
                "Permission is granted to roles and cannot be deleted",
                role_count=role_count,
            )

        name = permission.name
        async with write_scope(self.db, conflict="Permission is in use"):
            await self.db.execute(delete(Permission).where(Permission.id == permission_id))

        logger.info("permission_deleted", permission_id=permission_id, name=name)

    async def resolve_names(self, names: Iterable[str]) -> list[Permission]:
        """
        Look up permissions by name.

        Unknown names are dropped, or rejected with ``BadRequestError``
        when strict name resolution is enabled.
        """
        wanted = dedupe_names(names)
        if not wanted:
            return []

        result = await self.db.execute(select(Permission).where(Permission.name.in_(wanted)))
        permissions = list(result.scalars().all())
        check_unresolved("permission", wanted, (p.name for p in permissions), self.strict)
        return permissions

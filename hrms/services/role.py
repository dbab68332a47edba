"""
Role registry service.

Usage:
    service = RoleService(db)

    # Create a role with permissions
    role = await service.create_role(
        name="HR Manager",
        permission_names=["read_employees", "update_employees"],
    )

    # Replace its permissions entirely
    await service.update_role(role.id, permission_names=["read_employees"])

    # Leave permissions untouched
    await service.update_role(role.id, description="People team")
"""

from collections.abc import Iterable

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hrms.core.config import settings
from hrms.core.exceptions import BadRequestError, ConflictError, NotFoundError
from hrms.models.rbac import Role, RolePermission, UserRole
from .permission import PermissionService
from .transaction import write_scope

logger = structlog.get_logger()


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise BadRequestError("Role name is required")
    return name


class RoleService:
    """Manage roles and the permissions they bundle."""

    def __init__(self, db: AsyncSession, strict: bool | None = None):
        self.db = db
        self.strict = settings.rbac.strict_name_resolution if strict is None else strict
        self.permissions = PermissionService(db, strict=self.strict)

    def _enriched(self):
        """Role select with permissions and holders loaded fresh."""
        return (
            select(Role)
            .options(
                selectinload(Role.permission_links).selectinload(RolePermission.permission),
                selectinload(Role.user_links).selectinload(UserRole.user),
            )
            .execution_options(populate_existing=True)
        )

    async def get_by_name(self, name: str) -> Role | None:
        result = await self.db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def get_role(self, role_id: int) -> Role:
        """Get role with permissions, user count and users, or raise ``NotFoundError``."""
        result = await self.db.execute(self._enriched().where(Role.id == role_id))
        role = result.scalar_one_or_none()
        if role is None:
            raise NotFoundError("Role not found")
        return role

    async def list_roles(self) -> list[Role]:
        """List all roles, ordered by id."""
        result = await self.db.execute(self._enriched().order_by(Role.id))
        return list(result.scalars().all())

    async def create_role(
        self,
        name: str,
        description: str | None = None,
        permission_names: Iterable[str] | None = None,
    ) -> Role:
        """Create a role and grant it the named permissions."""
        name = _clean_name(name)
        if await self.get_by_name(name):
            raise ConflictError("Role name already exists")

        permissions = await self.permissions.resolve_names(permission_names or [])

        role = Role(name=name, description=description)
        async with write_scope(self.db, conflict="Role name already exists"):
            self.db.add(role)
            await self.db.flush()
            self.db.add_all(
                RolePermission(role_id=role.id, permission_id=p.id) for p in permissions
            )

        logger.info(
            "role_created",
            role_id=role.id,
            name=name,
            permissions=len(permissions),
        )
        return await self.get_role(role.id)

    async def update_role(
        self,
        role_id: int,
        name: str | None = None,
        description: str | None = None,
        permission_names: Iterable[str] | None = None,
    ) -> Role:
        """
        Update role properties.

        ``permission_names=None`` leaves the grants alone; any collection,
        empty included, replaces them.
        """
        role = await self.get_role(role_id)

        if name is not None:
            name = _clean_name(name)
        if name is not None and name != role.name:
            existing = await self.get_by_name(name)
            if existing is not None and existing.id != role_id:
                raise ConflictError("Role name already exists")

        permissions = None
        if permission_names is not None:
            permissions = await self.permissions.resolve_names(permission_names)

        async with write_scope(self.db, conflict="Role name already exists"):
            if name is not None:
                role.name = name
            if description is not None:
                role.description = description
            if permissions is not None:
                await self.db.execute(
                    delete(RolePermission).where(RolePermission.role_id == role_id)
                )
                self.db.add_all(
                    RolePermission(role_id=role_id, permission_id=p.id) for p in permissions
                )

        logger.info(
            "role_updated",
            role_id=role_id,
            replaced_permissions=permissions is not None,
        )
        return await self.get_role(role_id)

    async def delete_role(self, role_id: int) -> None:
        """Delete a role that no user holds, together with its grants."""
        role = await self.get_role(role_id)
        if role.user_count:
            raise ConflictError(
                "Role is assigned to users and cannot be deleted",
                user_count=role.user_count,
            )

        name = role.name
        async with write_scope(self.db, conflict="Role is assigned to users"):
            await self.db.execute(delete(RolePermission).where(RolePermission.role_id == role_id))
            await self.db.execute(delete(Role).where(Role.id == role_id))

        logger.info("role_deleted", role_id=role_id, name=name)

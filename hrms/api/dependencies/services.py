"""
Service dependencies.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .database import get_db
from hrms.services.assignment import AssignmentService
from hrms.services.permission import PermissionService
from hrms.services.resolver import AuthorizationResolver
from hrms.services.role import RoleService
from hrms.services.user import UserService


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    """Get user service instance."""
    return UserService(db)


async def get_permission_service(db: AsyncSession = Depends(get_db)) -> PermissionService:
    """Get permission catalog service instance."""
    return PermissionService(db)


async def get_role_service(db: AsyncSession = Depends(get_db)) -> RoleService:
    """Get role registry service instance."""
    return RoleService(db)


async def get_assignment_service(db: AsyncSession = Depends(get_db)) -> AssignmentService:
    """Get assignment service instance."""
    return AssignmentService(db)


async def get_resolver(db: AsyncSession = Depends(get_db)) -> AuthorizationResolver:
    """Get authorization resolver instance."""
    return AuthorizationResolver(db)

"""
User management routes.
"""

from fastapi import APIRouter, Depends, Query, status

from hrms.schemas.rbac import (
    PermissionCheckRequest,
    PermissionCheckResponse,
    PermissionResponse,
)
from hrms.schemas.user import UserCreate, UserListResponse, UserResponse, UserUpdate
from hrms.services.resolver import AuthorizationResolver
from hrms.services.user import UserService
from hrms.api.dependencies.permissions import require_permission, require_self_or_permission
from hrms.api.dependencies.services import get_resolver, get_user_service
from hrms.models.user import User

router = APIRouter()

can_view_user = require_self_or_permission("users", "read", "manage")


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    search: str | None = None,
    user_service: UserService = Depends(get_user_service),
    _: User = Depends(require_permission("users", "read", "manage")),
):
    """List users with their roles."""
    users, total = await user_service.list_users(
        page=page,
        per_page=per_page,
        search=search,
    )
    return UserListResponse(
        users=[UserResponse.from_user(u) for u in users],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    user_service: UserService = Depends(get_user_service),
    _: User = Depends(require_permission("users", "create", "manage")),
):
    """Create a user with roles and, for employees and agents, a profile."""
    user = await user_service.create_user(
        email=data.email,
        password=data.password,
        full_name=data.full_name,
        phone=data.phone,
        role_names=data.roles,
        user_type=data.user_type,
        department=data.department,
        date_of_joining=data.date_of_joining,
        company=data.company,
    )
    return UserResponse.from_user(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
    _: User = Depends(can_view_user),
):
    """Get user by ID."""
    user = await user_service.get_user(user_id)
    return UserResponse.from_user(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    user_service: UserService = Depends(get_user_service),
    _: User = Depends(require_permission("users", "update", "manage")),
):
    """Update user; a roles list replaces the current roles."""
    user = await user_service.update_user(user_id, data)
    return UserResponse.from_user(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
    _: User = Depends(require_permission("users", "delete", "manage")),
):
    """Delete user with its role assignments and profiles."""
    await user_service.delete_user(user_id)


@router.get("/{user_id}/permissions", response_model=list[PermissionResponse])
async def get_user_permissions(
    user_id: int,
    resolver: AuthorizationResolver = Depends(get_resolver),
    _: User = Depends(can_view_user),
):
    """Effective permissions granted through all of the user's roles."""
    permissions = await resolver.effective_permissions(user_id)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.post("/{user_id}/check-permission", response_model=PermissionCheckResponse)
async def check_permission(
    user_id: int,
    data: PermissionCheckRequest,
    resolver: AuthorizationResolver = Depends(get_resolver),
    _: User = Depends(can_view_user),
):
    """Whether the user holds exactly (resource, action)."""
    allowed = await resolver.has_permission(user_id, data.resource, data.action)
    return PermissionCheckResponse(has_permission=allowed)

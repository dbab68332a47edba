"""
Permission catalog routes.
"""

from fastapi import APIRouter, Depends, Query, status

from hrms.schemas.rbac import (
    MessageResponse,
    PermissionCreate,
    PermissionListResponse,
    PermissionResponse,
)
from hrms.services.permission import PermissionService
from hrms.api.dependencies.permissions import require_any_permission, require_permission
from hrms.api.dependencies.services import get_permission_service
from hrms.models.user import User

router = APIRouter()

can_read_catalog = require_any_permission(
    ("permissions", "read"),
    ("permissions", "manage"),
    ("roles", "read"),
    ("roles", "manage"),
)


@router.get("", response_model=PermissionListResponse)
async def list_permissions(
    grouped: bool = Query(False, description="Also group permissions by resource"),
    permission_service: PermissionService = Depends(get_permission_service),
    _: User = Depends(can_read_catalog),
):
    """List all permissions ordered by resource and action."""
    by_resource = await permission_service.list_permissions(group_by_resource=True)
    response = PermissionListResponse(
        permissions=[
            PermissionResponse.model_validate(p)
            for items in by_resource.values()
            for p in items
        ],
    )
    if grouped:
        response.grouped = {
            resource: [PermissionResponse.model_validate(p) for p in items]
            for resource, items in by_resource.items()
        }
    return response


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: int,
    permission_service: PermissionService = Depends(get_permission_service),
    _: User = Depends(can_read_catalog),
):
    """Get permission by ID."""
    permission = await permission_service.get_permission(permission_id)
    return PermissionResponse.model_validate(permission)


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    data: PermissionCreate,
    permission_service: PermissionService = Depends(get_permission_service),
    _: User = Depends(require_permission("roles", "create", "manage")),
):
    """Create a permission."""
    permission = await permission_service.create_permission(
        name=data.name,
        resource=data.resource,
        action=data.action,
        description=data.description,
    )
    return PermissionResponse.model_validate(permission)


@router.delete("/{permission_id}", response_model=MessageResponse)
async def delete_permission(
    permission_id: int,
    permission_service: PermissionService = Depends(get_permission_service),
    _: User = Depends(require_permission("roles", "delete", "manage")),
):
    """Delete a permission no role grants."""
    await permission_service.delete_permission(permission_id)
    return MessageResponse(message="Permission deleted successfully")

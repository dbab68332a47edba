"""
Role management routes.
"""

from fastapi import APIRouter, Depends, status

from hrms.schemas.rbac import (
    AssignRoleRequest,
    MessageResponse,
    RoleCreate,
    RoleResponse,
    RoleUpdate,
)
from hrms.services.assignment import AssignmentService
from hrms.services.role import RoleService
from hrms.api.dependencies.permissions import require_permission
from hrms.api.dependencies.services import get_assignment_service, get_role_service
from hrms.models.user import User

router = APIRouter()


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    role_service: RoleService = Depends(get_role_service),
    _: User = Depends(require_permission("roles", "read", "manage")),
):
    """List all roles with their permissions and users."""
    roles = await role_service.list_roles()
    return [RoleResponse.model_validate(r) for r in roles]


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: int,
    role_service: RoleService = Depends(get_role_service),
    _: User = Depends(require_permission("roles", "read", "manage")),
):
    """Get role by ID."""
    role = await role_service.get_role(role_id)
    return RoleResponse.model_validate(role)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: RoleCreate,
    role_service: RoleService = Depends(get_role_service),
    _: User = Depends(require_permission("roles", "create", "manage")),
):
    """Create a role, granting the named permissions."""
    role = await role_service.create_role(
        name=data.name,
        description=data.description,
        permission_names=data.permissions,
    )
    return RoleResponse.model_validate(role)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    data: RoleUpdate,
    role_service: RoleService = Depends(get_role_service),
    _: User = Depends(require_permission("roles", "update", "manage")),
):
    """Update a role; a permissions list replaces the current grants."""
    role = await role_service.update_role(
        role_id,
        name=data.name,
        description=data.description,
        permission_names=data.permissions,
    )
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role(
    role_id: int,
    role_service: RoleService = Depends(get_role_service),
    _: User = Depends(require_permission("roles", "delete", "manage")),
):
    """Delete a role no user holds."""
    await role_service.delete_role(role_id)
    return MessageResponse(message="Role deleted successfully")


@router.post("/{role_id}/users", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def assign_role(
    role_id: int,
    data: AssignRoleRequest,
    assignment_service: AssignmentService = Depends(get_assignment_service),
    _: User = Depends(require_permission("roles", "update", "manage")),
):
    """Assign this role to a user."""
    await assignment_service.assign_role(user_id=data.user_id, role_id=role_id)
    return MessageResponse(message="Role assigned successfully")


@router.delete("/{role_id}/users/{user_id}", response_model=MessageResponse)
async def remove_role(
    role_id: int,
    user_id: int,
    assignment_service: AssignmentService = Depends(get_assignment_service),
    _: User = Depends(require_permission("roles", "update", "manage")),
):
    """Remove this role from a user. Removing an absent assignment succeeds."""
    await assignment_service.remove_role(user_id=user_id, role_id=role_id)
    return MessageResponse(message="Role removed successfully")

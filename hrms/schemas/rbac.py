"""
Role and permission schemas.
"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field

PermissionAction = Literal["create", "read", "update", "delete", "manage"]


class PermissionCreate(BaseModel):
    """Permission creation request."""
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    resource: str = Field(min_length=1, max_length=100)
    action: PermissionAction


class PermissionResponse(BaseModel):
    """Permission response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    resource: str
    action: str


class PermissionListResponse(BaseModel):
    """Permission catalog, optionally grouped by resource."""
    permissions: list[PermissionResponse]
    grouped: dict[str, list[PermissionResponse]] | None = None


class RoleUserSummary(BaseModel):
    """User as listed on a role: never includes credentials."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: str


class RoleCreate(BaseModel):
    """Role creation request."""
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    permissions: list[str] = Field(
        default_factory=list,
        description="Permission names to grant",
    )


class RoleUpdate(BaseModel):
    """
    Role update request.

    ``permissions`` omitted (or null) keeps the current set; any list,
    including an empty one, replaces it entirely.
    """
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    permissions: list[str] | None = None


class RoleResponse(BaseModel):
    """Role with its permissions and holders."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    permissions: list[PermissionResponse]
    user_count: int
    users: list[RoleUserSummary]
    created_at: datetime
    updated_at: datetime


class AssignRoleRequest(BaseModel):
    """Assign a role to a user."""
    user_id: int = Field(ge=1)


class PermissionCheckRequest(BaseModel):
    """Point query for a (resource, action) pair."""
    resource: str = Field(min_length=1, max_length=100)
    action: str = Field(min_length=1, max_length=20)


class PermissionCheckResponse(BaseModel):
    """Result of a permission point query."""
    has_permission: bool


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str

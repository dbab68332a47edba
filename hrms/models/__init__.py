"""
Database models.
"""

from .base import Base, IntPKMixin, TimestampMixin
from .user import User, Employee, Agent
from .rbac import Permission, Role, RolePermission, UserRole, PERMISSION_ACTIONS

__all__ = [
    # Base
    "Base",
    "IntPKMixin",
    "TimestampMixin",
    # Identity
    "User",
    "Employee",
    "Agent",
    # RBAC
    "Permission",
    "Role",
    "RolePermission",
    "UserRole",
    "PERMISSION_ACTIONS",
]

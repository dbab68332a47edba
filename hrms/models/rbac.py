"""
RBAC Models - Permissions, Roles, and Assignments.

- Permission: named capability tagged with a (resource, action) pair
- Role: named bundle of permissions
- RolePermission: links a role to a permission
- UserRole: links a user to a role

Both join tables carry a surrogate id for convenience; their identity
is the (left, right) pair, enforced by a unique constraint. Those
constraints are what serialize concurrent duplicate inserts.
"""

from typing import TYPE_CHECKING
from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IntPKMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User


# Actions a permission may carry. "manage" is its own literal and is
# never expanded into the other four.
PERMISSION_ACTIONS = ("create", "read", "update", "delete", "manage")


class Permission(Base, IntPKMixin, TimestampMixin):
    """
    Permission definition.

    Examples:
        Permission(name="read_employees", resource="employees", action="read")
        Permission(name="manage_payroll", resource="payroll", action="manage")
    """

    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    resource: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(20), nullable=False)

    @property
    def pair(self) -> tuple[str, str]:
        return (self.resource, self.action)

    def __repr__(self) -> str:
        return f"<Permission {self.name} ({self.resource}:{self.action})>"


class Role(Base, IntPKMixin, TimestampMixin):
    """Named bundle of permissions assignable to users."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    permission_links: Mapped[list["RolePermission"]] = relationship(
        "RolePermission",
        back_populates="role",
        lazy="selectin",
        passive_deletes=True,
    )
    user_links: Mapped[list["UserRole"]] = relationship(
        "UserRole",
        back_populates="role",
        lazy="selectin",
        passive_deletes=True,
    )

    @property
    def permissions(self) -> list["Permission"]:
        """Permissions granted by this role, ordered by (resource, action)."""
        return sorted(
            (link.permission for link in self.permission_links),
            key=lambda p: (p.resource, p.action, p.id),
        )

    @property
    def users(self) -> list["User"]:
        """Users holding this role, ordered by id."""
        return sorted((link.user for link in self.user_links), key=lambda u: u.id)

    @property
    def user_count(self) -> int:
        return len(self.user_links)

    def __repr__(self) -> str:
        return f"<Role {self.name}>"


class RolePermission(Base, IntPKMixin):
    """Grant of one permission to one role."""

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
    )

    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission_id: Mapped[int] = mapped_column(
        ForeignKey("permissions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    role: Mapped["Role"] = relationship("Role", back_populates="permission_links")
    permission: Mapped["Permission"] = relationship("Permission", lazy="selectin")

    def __repr__(self) -> str:
        return f"<RolePermission role={self.role_id} permission={self.permission_id}>"


class UserRole(Base, IntPKMixin, TimestampMixin):
    """Assignment of one role to one user."""

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_role"),
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="role_links", lazy="selectin")
    role: Mapped["Role"] = relationship("Role", back_populates="user_links", lazy="selectin")

    def __repr__(self) -> str:
        return f"<UserRole user={self.user_id} role={self.role_id}>"

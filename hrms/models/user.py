"""
User identity models.

A User may own one Employee profile and/or one Agent profile. Both
profiles reference the user with ON DELETE CASCADE; the service layer
still removes them explicitly (see ``UserService.delete_user``).
"""

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import Boolean, Date, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IntPKMixin, TimestampMixin

if TYPE_CHECKING:
    from .rbac import UserRole


class User(Base, IntPKMixin, TimestampMixin):
    """User account model."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    role_links: Mapped[list["UserRole"]] = relationship(
        "UserRole",
        back_populates="user",
        lazy="selectin",
        passive_deletes=True,
    )
    employee: Mapped[Optional["Employee"]] = relationship(
        "Employee",
        back_populates="user",
        uselist=False,
        lazy="selectin",
        passive_deletes=True,
    )
    agent: Mapped[Optional["Agent"]] = relationship(
        "Agent",
        back_populates="user",
        uselist=False,
        lazy="selectin",
        passive_deletes=True,
    )

    @property
    def role_names(self) -> list[str]:
        """Names of the roles assigned to this user, ordered by name."""
        return sorted(link.role.name for link in self.role_links)

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class Employee(Base, IntPKMixin, TimestampMixin):
    """Employee profile attached to a user."""

    __tablename__ = "employees"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    employee_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    date_of_joining: Mapped[date | None] = mapped_column(Date, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="employee")

    def __repr__(self) -> str:
        return f"<Employee {self.employee_code}>"


class Agent(Base, IntPKMixin, TimestampMixin):
    """Recruitment agent profile attached to a user."""

    __tablename__ = "agents"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    agent_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="agent")

    def __repr__(self) -> str:
        return f"<Agent {self.agent_code}>"

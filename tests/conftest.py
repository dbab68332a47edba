"""
Pytest fixtures for testing.

Provides:
- Async database session over an in-memory SQLite engine
- Test client with the database dependency overridden
- Factory fixtures for users, permissions and roles
- Auth header helpers, including an administrator holding every
  "manage" permission
"""

from typing import AsyncGenerator
from uuid import uuid4

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from hrms.main import app
from hrms.core.security import hash_password
from hrms.models.base import Base
from hrms.models.rbac import Permission, Role, RolePermission, UserRole
from hrms.models.user import User
from hrms.api.dependencies.database import get_db
from hrms.services.auth import AuthService


# Test database URL (SQLite in-memory for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_PASSWORD = "testpassword123"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session shared by the test body and the app."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with database session override.

    Successful requests commit, like ``get_db`` does; failed requests
    leave the session to the service layer, which has already rolled
    back any write it started.
    """

    async def override_get_db():
        yield db
        await db.commit()

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ============ Factory Fixtures ============


class UserFactory:
    """Factory for creating test users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        full_name: str = "Test User",
        is_active: bool = True,
    ) -> User:
        """Create a user in the database."""
        email = email or f"test-{uuid4().hex[:8]}@example.com"

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            is_active=is_active,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user


class RBACFactory:
    """Factory for permissions, roles and assignments, written directly to the store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def permission(
        self,
        name: str,
        resource: str | None = None,
        action: str | None = None,
        description: str | None = None,
    ) -> Permission:
        """
        Create a permission; "read_payroll" style names imply the pair.
        """
        if resource is None or action is None:
            action, _, resource = name.partition("_")
        permission = Permission(
            name=name,
            resource=resource,
            action=action,
            description=description,
        )
        self.db.add(permission)
        await self.db.commit()
        await self.db.refresh(permission)
        return permission

    async def role(
        self,
        name: str,
        permissions: list[Permission] | None = None,
        description: str | None = None,
    ) -> Role:
        role = Role(name=name, description=description)
        self.db.add(role)
        await self.db.flush()
        for permission in permissions or []:
            self.db.add(RolePermission(role_id=role.id, permission_id=permission.id))
        await self.db.commit()
        await self.db.refresh(role)
        return role

    async def assign(self, user: User, *roles: Role) -> None:
        for role in roles:
            self.db.add(UserRole(user_id=user.id, role_id=role.id))
        await self.db.commit()


@pytest_asyncio.fixture
async def user_factory(db: AsyncSession) -> UserFactory:
    """Fixture that provides UserFactory."""
    return UserFactory(db)


@pytest_asyncio.fixture
async def rbac(db: AsyncSession) -> RBACFactory:
    """Fixture that provides RBACFactory."""
    return RBACFactory(db)


@pytest_asyncio.fixture
async def test_user(user_factory: UserFactory) -> User:
    """Create a standard test user with no roles."""
    return await user_factory.create()


@pytest_asyncio.fixture
async def admin_user(user_factory: UserFactory, rbac: RBACFactory) -> User:
    """Create an administrator holding manage on users, roles and permissions."""
    permissions = [
        await rbac.permission("manage_users", "users", "manage"),
        await rbac.permission("manage_roles", "roles", "manage"),
        await rbac.permission("manage_permissions", "permissions", "manage"),
    ]
    role = await rbac.role("Admin", permissions, description="Full access")
    user = await user_factory.create(email="admin@example.com", full_name="Admin User")
    await rbac.assign(user, role)
    return user


# ============ Auth Helpers ============


async def get_auth_headers(db: AsyncSession, user: User) -> dict[str, str]:
    """Helper to get auth headers for any user."""
    auth_service = AuthService(db)
    loaded = await auth_service.users.get_user(user.id)
    token = auth_service.create_access_token(loaded)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_headers(db: AsyncSession, test_user: User) -> dict[str, str]:
    """Get auth headers for test user."""
    return await get_auth_headers(db, test_user)


@pytest_asyncio.fixture
async def admin_auth_headers(db: AsyncSession, admin_user: User) -> dict[str, str]:
    """Get auth headers for admin user."""
    return await get_auth_headers(db, admin_user)


@pytest_asyncio.fixture
async def headers_for(db: AsyncSession):
    """Auth headers for an arbitrary user: ``await headers_for(user)``."""

    async def _headers(user: User) -> dict[str, str]:
        return await get_auth_headers(db, user)

    return _headers

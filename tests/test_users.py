"""
Tests for user management.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.exceptions import BadRequestError, ConflictError, NotFoundError
from hrms.models.rbac import UserRole
from hrms.models.user import Agent, Employee, User
from hrms.schemas.user import UserUpdate
from hrms.services.user import UserService


@pytest.mark.asyncio
async def test_create_employee_with_roles(db: AsyncSession, rbac):
    """Test creating an employee creates the profile and assigns roles."""
    await rbac.role("Employee")
    service = UserService(db)

    user = await service.create_user(
        email="jane@example.com",
        password="securepassword123",
        full_name="Jane Doe",
        role_names=["Employee"],
        user_type="employee",
        department="Engineering",
    )

    assert user.role_names == ["Employee"]
    assert user.employee is not None
    assert user.employee.employee_code == f"EMP{user.id:03d}"
    assert user.employee.department == "Engineering"
    assert user.agent is None
    assert user.password_hash != "securepassword123"


@pytest.mark.asyncio
async def test_create_agent(db: AsyncSession):
    """Test creating an agent creates an agent profile."""
    user = await UserService(db).create_user(
        email="agent@example.com",
        password="securepassword123",
        full_name="Recruiter",
        user_type="agent",
        company="Acme Staffing",
    )

    assert user.agent.agent_code == f"AGT{user.id:03d}"
    assert user.agent.company == "Acme Staffing"
    assert user.employee is None


@pytest.mark.asyncio
async def test_create_user_duplicate_email(db: AsyncSession, test_user):
    """Test emails are unique."""
    with pytest.raises(ConflictError):
        await UserService(db).create_user(
            email=test_user.email,
            password="securepassword123",
            full_name="Copy",
        )


@pytest.mark.asyncio
async def test_create_user_strict_unknown_role_writes_nothing(db: AsyncSession):
    """Test a strict-mode rejection leaves no user behind."""
    service = UserService(db, strict=True)

    with pytest.raises(BadRequestError):
        await service.create_user(
            email="jane@example.com",
            password="securepassword123",
            full_name="Jane Doe",
            role_names=["Ghost"],
        )

    assert await service.get_by_email("jane@example.com") is None


@pytest.mark.asyncio
async def test_create_user_short_password(db: AsyncSession):
    """Test the configured minimum password length applies to the service."""
    with pytest.raises(BadRequestError):
        await UserService(db).create_user(
            email="jane@example.com",
            password="short",
            full_name="Jane Doe",
        )


@pytest.mark.asyncio
async def test_update_user_roles_replace_contract(db: AsyncSession, rbac, test_user):
    """Test omitted roles are kept and a roles list replaces them."""
    hr = await rbac.role("HR")
    await rbac.role("Finance")
    await rbac.assign(test_user, hr)
    service = UserService(db)

    user = await service.update_user(test_user.id, UserUpdate(full_name="Renamed"))
    assert user.full_name == "Renamed"
    assert user.role_names == ["HR"]

    user = await service.update_user(test_user.id, UserUpdate(roles=["Finance"]))
    assert user.role_names == ["Finance"]

    user = await service.update_user(test_user.id, UserUpdate(roles=[]))
    assert user.role_names == []


@pytest.mark.asyncio
async def test_update_user_email_collision(db: AsyncSession, user_factory):
    """Test changing email onto another user's email fails."""
    first = await user_factory.create(email="first@example.com")
    second = await user_factory.create(email="second@example.com")

    with pytest.raises(ConflictError):
        await UserService(db).update_user(second.id, UserUpdate(email=first.email))


@pytest.mark.asyncio
async def test_delete_user_removes_dependents(db: AsyncSession, rbac):
    """Test deleting a user removes assignments and profiles."""
    await rbac.role("Employee")
    service = UserService(db)
    user = await service.create_user(
        email="jane@example.com",
        password="securepassword123",
        full_name="Jane Doe",
        role_names=["Employee"],
        user_type="employee",
    )
    user_id = user.id

    await service.delete_user(user_id)

    assert await db.scalar(select(User.id).where(User.id == user_id)) is None
    for model in (UserRole, Employee, Agent):
        count = await db.scalar(
            select(func.count()).select_from(model).where(model.user_id == user_id)
        )
        assert count == 0


@pytest.mark.asyncio
async def test_delete_user_not_found(db: AsyncSession):
    """Test deleting an unknown user."""
    with pytest.raises(NotFoundError):
        await UserService(db).delete_user(999)


@pytest.mark.asyncio
async def test_list_users_search(db: AsyncSession, user_factory):
    """Test listing filters by email or name and paginates."""
    await user_factory.create(email="alice@example.com", full_name="Alice")
    await user_factory.create(email="bob@example.com", full_name="Bob")
    service = UserService(db)

    users, total = await service.list_users(search="alice")
    assert total == 1
    assert users[0].email == "alice@example.com"

    users, total = await service.list_users(page=2, per_page=1)
    assert total == 2
    assert [u.full_name for u in users] == ["Bob"]


# ============ HTTP ============


@pytest.mark.asyncio
async def test_create_user_endpoint(client: AsyncClient, admin_auth_headers: dict, rbac):
    """Test creating a user over HTTP."""
    await rbac.role("Employee")

    response = await client.post(
        "/api/users",
        headers=admin_auth_headers,
        json={
            "email": "jane@example.com",
            "password": "securepassword123",
            "full_name": "Jane Doe",
            "roles": ["Employee"],
            "user_type": "employee",
            "date_of_joining": "2024-01-15",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["roles"] == ["Employee"]
    assert data["user_type"] == "employee"
    assert "password" not in data
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_get_self_without_permission(
    client: AsyncClient,
    test_user: User,
    auth_headers: dict,
):
    """Test users may always read their own record."""
    response = await client.get(f"/api/users/{test_user.id}", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == test_user.email
    assert data["roles"] == []
    assert data["user_type"] == "user"


@pytest.mark.asyncio
async def test_list_users_requires_permission(client: AsyncClient, auth_headers: dict):
    """Test that listing users requires users:read or users:manage."""
    response = await client.get("/api/users", headers=auth_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_users_as_admin(
    client: AsyncClient,
    admin_auth_headers: dict,
    test_user: User,
):
    """Test listing users as administrator."""
    response = await client.get("/api/users", headers=admin_auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert {u["email"] for u in data["users"]} == {"admin@example.com", test_user.email}


@pytest.mark.asyncio
async def test_update_user_endpoint_replaces_roles(
    client: AsyncClient,
    admin_auth_headers: dict,
    rbac,
    test_user: User,
):
    """Test PUT with a roles list replaces the user's roles."""
    await rbac.assign(test_user, await rbac.role("HR"))
    await rbac.role("Finance")

    response = await client.put(
        f"/api/users/{test_user.id}",
        headers=admin_auth_headers,
        json={"roles": ["Finance"]},
    )

    assert response.status_code == 200
    assert response.json()["roles"] == ["Finance"]


@pytest.mark.asyncio
async def test_delete_user_endpoint(
    client: AsyncClient,
    admin_auth_headers: dict,
    test_user: User,
):
    """Test deleting a user returns 204 and the user is gone."""
    user_id = test_user.id

    response = await client.delete(f"/api/users/{user_id}", headers=admin_auth_headers)
    assert response.status_code == 204

    response = await client.get(f"/api/users/{user_id}", headers=admin_auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_user_clears_phone(db: AsyncSession):
    """Test an explicit null clears phone while required fields ignore null."""
    service = UserService(db)
    user = await service.create_user(
        email="jane@example.com",
        password="securepassword123",
        full_name="Jane Doe",
        phone="555-0100",
    )

    user = await service.update_user(user.id, UserUpdate(phone=None, full_name=None))

    assert user.phone is None
    assert user.full_name == "Jane Doe"


@pytest.mark.asyncio
async def test_update_user_endpoint_clears_phone(
    client: AsyncClient,
    admin_auth_headers: dict,
    user_factory,
):
    """Test PUT with phone set to null removes the phone number."""
    user = await user_factory.create()
    response = await client.put(
        f"/api/users/{user.id}",
        headers=admin_auth_headers,
        json={"phone": "555-0100"},
    )
    assert response.json()["phone"] == "555-0100"

    response = await client.put(
        f"/api/users/{user.id}",
        headers=admin_auth_headers,
        json={"phone": None},
    )

    assert response.status_code == 200
    assert response.json()["phone"] is None

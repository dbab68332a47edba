"""
Tests for application wiring: health, request ids and error rendering.
"""

import pytest
from httpx import AsyncClient

from hrms.core.exceptions import (
    BadRequestError,
    ConflictError,
    InternalError,
    NotFoundError,
)


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    """Test the liveness endpoint."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_request_id_echoed(client: AsyncClient):
    """Test a caller-supplied request id is returned."""
    response = await client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient):
    """Test a request id is generated when none is supplied."""
    response = await client.get("/health")

    assert response.headers.get("X-Request-ID")


@pytest.mark.asyncio
async def test_invalid_path_param_is_bad_request(client: AsyncClient, admin_auth_headers: dict):
    """Test request validation failures render as 400 with an error message."""
    response = await client.get("/api/roles/not-a-number", headers=admin_auth_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"


@pytest.mark.asyncio
async def test_unauthenticated_error_shape(client: AsyncClient):
    """Test auth failures use the same error body."""
    response = await client.get("/api/roles")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


@pytest.mark.asyncio
async def test_missing_user_is_not_found(client: AsyncClient, admin_auth_headers: dict):
    """Test resolver lookups for a missing user are 404s."""
    response = await client.get("/api/users/999/permissions", headers=admin_auth_headers)

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_error_status_codes():
    """Test each service error carries its HTTP status and renders extras."""
    assert NotFoundError("x").status_code == 404
    assert ConflictError("x").status_code == 400
    assert BadRequestError("x").status_code == 400
    assert InternalError().status_code == 500

    error = ConflictError("Role is assigned to users", user_count=3)
    assert error.to_dict() == {"error": "Role is assigned to users", "user_count": 3}
    assert InternalError().to_dict() == {"error": "Internal server error"}

"""
Tests for the shared write scope.
"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.exceptions import ConflictError, InternalError
from hrms.models.rbac import Role
from hrms.services.transaction import write_scope


@pytest.mark.asyncio
async def test_write_scope_flushes_on_exit(db: AsyncSession):
    """Test the block is flushed so generated ids are available."""
    role = Role(name="HR")

    async with write_scope(db):
        db.add(role)

    assert role.id is not None


@pytest.mark.asyncio
async def test_store_failure_is_internal_and_rolled_back(db: AsyncSession):
    """Test a non-integrity store error becomes a generic internal error."""
    with pytest.raises(InternalError) as exc_info:
        async with write_scope(db):
            db.add(Role(name="Pending"))
            await db.flush()
            raise OperationalError("UPDATE roles", {}, Exception("disk I/O error"))

    assert exc_info.value.message == "Internal server error"
    assert exc_info.value.to_dict() == {"error": "Internal server error"}
    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert await db.scalar(select(Role.id).where(Role.name == "Pending")) is None


@pytest.mark.asyncio
async def test_integrity_failure_is_conflict_and_rolled_back(db: AsyncSession, rbac):
    """Test a unique violation rolls back every row written in the block."""
    await rbac.role("HR")

    with pytest.raises(ConflictError) as exc_info:
        async with write_scope(db, conflict="Role name already exists"):
            db.add(Role(name="Finance"))
            await db.flush()
            db.add(Role(name="HR"))

    assert exc_info.value.message == "Role name already exists"
    assert await db.scalar(select(Role.id).where(Role.name == "Finance")) is None

"""
Write scope shared by every mutating service call.

Usage:
    async with write_scope(self.db, conflict="Role name already exists"):
        self.db.add(role)

The block is flushed on exit. A unique-constraint violation rolls the
session back and surfaces as ``ConflictError``; any other store failure
rolls back and surfaces as a generic ``InternalError``.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.exceptions import ConflictError, InternalError

logger = structlog.get_logger()


@asynccontextmanager
async def write_scope(
    db: AsyncSession,
    conflict: str = "Resource already exists",
) -> AsyncIterator[None]:
    try:
        yield
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        logger.info("write_conflict", reason=str(exc.orig))
        raise ConflictError(conflict) from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("store_failure", error_type=type(exc).__name__)
        raise InternalError() from exc

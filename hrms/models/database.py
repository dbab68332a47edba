"""
Database connection and session management.
"""

from typing import Any
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)

from hrms.core.config import DatabaseSettings, settings


def build_engine(db_settings: DatabaseSettings) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    kwargs: dict[str, Any] = {"echo": db_settings.echo}
    if not db_settings.url.startswith("sqlite"):
        kwargs.update(
            pool_size=db_settings.pool_size,
            max_overflow=db_settings.pool_overflow,
            pool_timeout=db_settings.pool_timeout,
            pool_pre_ping=True,
        )
    return create_async_engine(db_settings.url, **kwargs)


engine = build_engine(settings.database)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize database (create tables)."""
    from .base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()

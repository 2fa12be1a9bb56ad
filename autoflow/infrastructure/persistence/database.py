"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Schema is managed by Alembic migrations (migrations/versions).

Engine and session factory are created lazily on first use (get_db /
get_db_transactional / get_session_factory) so import does not trigger
Settings validation.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from autoflow.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def create_session_factory(engine_: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return the session factory used by routes and the Execution Store."""
    return async_sessionmaker(
        bind=engine_,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    kwargs: dict[str, Any] = {"echo": settings.database_echo, "pool_pre_ping": True}
    if "postgresql" in settings.database_url:
        kwargs["pool_size"] = (
            settings.db_pool_size if settings.db_pool_size is not None else 20
        )
        kwargs["max_overflow"] = (
            settings.db_max_overflow if settings.db_max_overflow is not None else 30
        )
        kwargs["pool_recycle"] = 3600
    engine = create_async_engine(settings.database_url, **kwargs)
    AsyncSessionLocal = create_session_factory(engine)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory (creating the engine if needed)."""
    _ensure_engine()
    assert AsyncSessionLocal is not None
    return AsyncSessionLocal


async def dispose_engine() -> None:
    """Dispose the engine on shutdown (no-op if never created)."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


async def get_db():
    """Database session dependency for read operations.

    Does not commit; use get_db_transactional for writes.
    Yields a session and closes it on exit.
    """
    async with get_session_factory()() as session:
        yield session


async def get_db_transactional():
    """Database session dependency for write operations.

    Begins a transaction, commits on success, rolls back on exception.
    Use for POST, PUT, PATCH, DELETE endpoints.
    """
    async with get_session_factory()() as session:
        async with session.begin():
            yield session

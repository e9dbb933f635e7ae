"""
Database connection and session management.

Provides the async SQLAlchemy engine, session factory and schema bootstrap
for FastAPI endpoints. PostgreSQL (asyncpg) is the deployment target;
SQLite (aiosqlite) is supported for local development and tests.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from shop.core.config import settings
from shop.core.query_stats import install_query_counter

logger = logging.getLogger(__name__)

_async_engine: AsyncEngine | None = None
_async_sessionmaker: async_sessionmaker | None = None
_telemetry_instrumented: bool = False


def _engine_kwargs(url: str) -> dict[str, Any]:
    """
    Engine options for the given async URL.

    In-memory SQLite needs a single shared connection (StaticPool), otherwise
    every checkout would see an empty database. Pool sizing only applies to
    server databases.
    """
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
        return kwargs

    return {
        "pool_size": 20,  # Number of connections to maintain
        "max_overflow": 10,  # Additional connections allowed beyond pool_size
        "pool_timeout": 30,  # Seconds to wait before giving up on getting a connection
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "pool_pre_ping": True,  # Verify connections before use
        "connect_args": {"server_settings": {"timezone": "UTC"}, "timeout": 30},
    }


def create_fresh_async_engine(url: str | None = None) -> AsyncEngine:
    """Create a fresh async engine without caching.

    Used for tests to ensure each test gets its own engine bound to its event loop.
    """
    url = url or settings.async_url
    if not url:
        raise RuntimeError("DATABASE_URL_APP is required")

    engine = create_async_engine(url, echo=settings.db_echo, **_engine_kwargs(url))
    install_query_counter(engine)
    return engine


def get_async_engine() -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    Returns:
        Configured async SQLAlchemy engine
    """
    global _async_engine

    if _async_engine is not None:
        return _async_engine

    _async_engine = create_fresh_async_engine()
    _instrument_sqlalchemy(_async_engine)
    return _async_engine


def _instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """
    Instrument the engine with OpenTelemetry.

    Args:
        engine: Async SQLAlchemy engine instance
    """
    global _telemetry_instrumented

    if _telemetry_instrumented:
        return

    try:
        from shop.core.telemetry import instrument_sqlalchemy

        instrument_sqlalchemy(engine.sync_engine)
        _telemetry_instrumented = True
    except ImportError:
        logger.debug("OpenTelemetry not available - skipping SQLAlchemy instrumentation")


def get_async_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """
    Get or create the async sessionmaker.

    Returns:
        Async sessionmaker factory
    """
    global _async_sessionmaker
    if _async_sessionmaker is not None:
        return _async_sessionmaker

    _async_sessionmaker = make_sessionmaker(get_async_engine())
    return _async_sessionmaker


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a sessionmaker with the application's session options."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def reset_async_engine() -> None:
    """Reset the async database engine and sessionmaker.

    Useful for tests to ensure fresh connections on new event loops.
    """
    global _async_engine, _async_sessionmaker

    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_sessionmaker = None


async def create_schema(engine: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    from shop.db.models import Base

    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


async def drop_schema(engine: AsyncEngine | None = None) -> None:
    """Drop all application tables."""
    from shop.db.models import Base

    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database schema dropped")


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session for scripts: commits on success, rolls back on error.

    Usage:
        async with session_scope() as db:
            await seed_sample_orders(db)
    """
    session_maker = get_async_sessionmaker()
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

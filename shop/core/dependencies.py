"""
FastAPI dependency injection utilities.

Provides the request-scoped database session.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop.core.db import get_async_sessionmaker


async def get_async_db_session() -> AsyncGenerator[AsyncSession]:
    """
    Async database session dependency for FastAPI endpoints.

    One session per request. Every endpoint is read-only, so the session is
    rolled back (never committed) and closed when the request ends. Response
    payloads are built before that happens.

    Usage:
        @router.get("/orders")
        async def list_orders(db: AsyncDbSession):
            ...

    Yields:
        Async SQLAlchemy database session
    """
    session_maker = get_async_sessionmaker()
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


# Type alias for async database session dependency
AsyncDbSession = Annotated[AsyncSession, Depends(get_async_db_session)]

"""
Pytest configuration and shared fixtures.

Tests run against in-memory SQLite through aiosqlite. One StaticPool
connection holds the database for the lifetime of the engine fixture.

Async SQLAlchemy Fixtures:
- async_engine: Function-scoped engine with the schema created
- seeded: Commits the two sample orders in their own session
- db: A fresh session on the seeded database (empty identity map)
- client: httpx AsyncClient; each request gets its own session

Factories:
- add_orders: Commit N generated orders with distinct members and items
"""

from __future__ import annotations

import os
import sys
from collections.abc import AsyncGenerator
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

# Add project root to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Set test environment variables before importing the app
os.environ.setdefault("DATABASE_URL_APP", TEST_DATABASE_URL)
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("OBSERVABILITY_STRUCTURED_LOGS", "false")

import httpx  # noqa: E402 (import after env setup)
import pytest  # noqa: E402 (import after env setup)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession  # noqa: E402

from shop.core.db import (  # noqa: E402 (import after env setup)
    create_fresh_async_engine,
    create_schema,
    make_sessionmaker,
)
from shop.core.dependencies import get_async_db_session  # noqa: E402
from shop.db.models import Address, Order  # noqa: E402
from shop.db.seed import build_order, seed_sample_orders  # noqa: E402
from shop.main import create_app  # noqa: E402


# =============================================================================
# AnyIO Backend Configuration
# =============================================================================
# Per AnyIO testing docs: https://anyio.readthedocs.io/en/stable/testing.html
@pytest.fixture
def anyio_backend():
    return "asyncio"


# ============================================================================
# Async SQLAlchemy Fixtures
# ============================================================================


@pytest.fixture(scope="function")
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Fresh in-memory database with all tables created.

    Uses create_fresh_async_engine() so the statement counter is installed
    exactly as in the application.
    """
    engine = create_fresh_async_engine(TEST_DATABASE_URL)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
async def seeded(async_engine: AsyncEngine) -> list[int]:
    """Commit the sample orders in a separate session; returns their ids."""
    session_maker = make_sessionmaker(async_engine)
    async with session_maker() as session:
        orders = await seed_sample_orders(session)
        await session.commit()
        return [order.id for order in orders]


@pytest.fixture(scope="function")
async def db(async_engine: AsyncEngine, seeded: list[int]) -> AsyncGenerator[AsyncSession]:
    """
    Session over the seeded database with an empty identity map.

    Statement counts depend on what the session already holds, so queries
    under test never share a session with the seeding code.
    """
    session_maker = make_sessionmaker(async_engine)
    async with session_maker() as session:
        yield session


@pytest.fixture(scope="function")
async def empty_db(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session over a database with the schema but no rows."""
    session_maker = make_sessionmaker(async_engine)
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(async_engine: AsyncEngine, seeded: list[int]):
    """AsyncClient over the seeded database; one session per request."""
    app = create_app()
    session_maker = make_sessionmaker(async_engine)

    async def override_get_async_db():
        async with session_maker() as session:
            try:
                yield session
            finally:
                await session.rollback()

    app.dependency_overrides[get_async_db_session] = override_get_async_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ============================================================================
# Test Data Factories
# ============================================================================


@pytest.fixture
def add_orders(async_engine: AsyncEngine, seeded: list[int]):
    """
    Factory committing generated orders after the sample ones.

    Each order gets its own member, delivery and items, so row-by-row
    loading cannot be served from the identity map.
    """

    async def _add_orders(count: int, lines_per_order: int = 2) -> list[Order]:
        orders = [
            build_order(
                f"member-{n}",
                Address(f"city-{n}", str(n), f"{n:05d}"),
                [
                    (f"item-{n}-{line}", 1000 * (line + 1), line + 1)
                    for line in range(lines_per_order)
                ],
            )
            for n in range(count)
        ]
        session_maker = make_sessionmaker(async_engine)
        async with session_maker() as session:
            session.add_all(orders)
            await session.commit()
        return orders

    return _add_orders

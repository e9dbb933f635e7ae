"""
Local database commands.

Both commands use DATABASE_URL_APP. There are no migrations; the schema
is created straight from the ORM metadata.

Usage:
    uv run db-init    # Create tables
    uv run db-seed    # Create tables and insert the two sample orders
"""

from __future__ import annotations

import asyncio
import logging

from shop.core.db import create_schema, reset_async_engine, session_scope
from shop.db.seed import seed_sample_orders

logger = logging.getLogger(__name__)


async def _init() -> None:
    try:
        await create_schema()
    finally:
        await reset_async_engine()


async def _seed() -> None:
    try:
        await create_schema()
        async with session_scope() as db:
            orders = await seed_sample_orders(db)
            print(f"Inserted {len(orders)} orders")
    finally:
        await reset_async_engine()


def init() -> None:
    """Create all tables."""
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_init())
    print("Schema created")


def seed() -> None:
    """Create all tables and insert the sample dataset."""
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_seed())

"""
Order listings including the order item collection.

- v1:   entities walked row by row, entity shape (1 + 3N + K)
- v2:   same loading, shaped into a response model (1 + 3N + K)
- v3:   one statement fetch-joining every association; not pageable
- v3.1: to-one fetch join, items loaded in batches (<= ceil(N / batch) + 1);
        pageable by order
- v4:   projections, one item query per order (1 + N)
- v5:   projections, one ``IN`` query for all items (2)
- v6:   one joined projection statement grouped in memory (1); not pageable

N is the number of orders, K the number of order items. None of these
endpoints takes paging parameters.
"""

from fastapi import APIRouter

from shop.api.schemas.order import OrderEntityResponse, OrderQueryResponse, OrderResponse
from shop.core.config import settings
from shop.core.dependencies import AsyncDbSession
from shop.services import order_query_service

router = APIRouter(tags=["orders"])


@router.get("/v1/orders", response_model=list[OrderEntityResponse])
async def orders_v1(db: AsyncDbSession):
    """Entity-shaped orders with lines; exposes every persisted column."""
    return await order_query_service.order_entities(db)


@router.get("/v2/orders", response_model=list[OrderResponse])
async def orders_v2(db: AsyncDbSession):
    """Entities loaded row by row then shaped."""
    return await order_query_service.orders_traversed(db)


@router.get("/v3/orders", response_model=list[OrderResponse])
async def orders_v3(db: AsyncDbSession):
    """Single fetch join over member, delivery, lines and items."""
    return await order_query_service.orders_fetch_join(db)


@router.get("/v3.1/orders", response_model=list[OrderResponse])
async def orders_v3_1(db: AsyncDbSession):
    """To-one fetch join; lines loaded BATCH_FETCH_SIZE orders at a time."""
    return await order_query_service.orders_batch_fetch(db, batch_size=settings.batch_fetch_size)


@router.get("/v4/orders", response_model=list[OrderQueryResponse])
async def orders_v4(db: AsyncDbSession):
    """Projection per order; one item query per order."""
    return await order_query_service.orders_projection(db)


@router.get("/v5/orders", response_model=list[OrderQueryResponse])
async def orders_v5(db: AsyncDbSession):
    """Projection with the item collection loaded in one extra query."""
    return await order_query_service.orders_projection_optimized(db)


@router.get("/v6/orders", response_model=list[OrderQueryResponse])
async def orders_v6(db: AsyncDbSession):
    """One joined projection, grouped by order id in memory."""
    return await order_query_service.orders_projection_flat(db)

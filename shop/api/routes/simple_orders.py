"""
Order listings with to-one associations only (Order -> Member, Order -> Delivery).

Versions trade generality for fewer and narrower statements:

- v1: entities walked row by row, returned in entity shape (1 + 2N)
- v2: same loading, shaped into a response model (1 + 2N)
- v3: member and delivery fetch-joined (1)
- v4: projection query selecting only the response columns (1)

v3 and v4 share the same joins; they differ only in the select list, which
rarely matters for latency. Prefer v3 for reuse and fall back to v4 for
wide tables on hot paths.
"""

from fastapi import APIRouter

from shop.api.schemas.order import OrderEntityResponse, SimpleOrderResponse
from shop.core.dependencies import AsyncDbSession
from shop.services import order_query_service

router = APIRouter(tags=["simple-orders"])


@router.get("/v1/simple-orders", response_model=list[OrderEntityResponse])
async def simple_orders_v1(db: AsyncDbSession):
    """Entity-shaped orders; exposes every persisted column."""
    return await order_query_service.simple_order_entities(db)


@router.get("/v2/simple-orders", response_model=list[SimpleOrderResponse])
async def simple_orders_v2(db: AsyncDbSession):
    """Entities loaded then shaped; one extra statement per member and delivery."""
    return await order_query_service.simple_orders_traversed(db)


@router.get("/v3/simple-orders", response_model=list[SimpleOrderResponse])
async def simple_orders_v3(db: AsyncDbSession):
    """Entities with member and delivery fetch-joined in one statement."""
    return await order_query_service.simple_orders_fetch_join(db)


@router.get("/v4/simple-orders", response_model=list[SimpleOrderResponse])
async def simple_orders_v4(db: AsyncDbSession):
    """Projection query; one statement, only the response columns."""
    return await order_query_service.simple_orders_projection(db)

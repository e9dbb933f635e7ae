"""
Order listing use cases, one per query strategy.

Every function runs its repository call and builds the response payloads
while the caller's session is still open. Shaping only touches
associations the strategy loaded; anything else raises (``lazy="raise"``)
rather than issuing a query after the fact.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shop.api.schemas.order import (
    AddressResponse,
    DeliveryResponse,
    MemberResponse,
    OrderEntityResponse,
    OrderItemEntityResponse,
    OrderItemResponse,
    OrderQueryResponse,
    OrderResponse,
    SimpleOrderResponse,
)
from shop.db.models import Order
from shop.repos import order_query_repo, order_repo
from shop.repos.projections import OrderQueryRecord

logger = logging.getLogger(__name__)


# ============================================================================
# Shaping
# ============================================================================


def to_simple_order(order: Order) -> SimpleOrderResponse:
    return SimpleOrderResponse(
        order_id=order.id,
        name=order.member.name,
        order_date=order.order_date,
        order_status=order.status,
        address=AddressResponse.model_validate(order.delivery.address),
    )


def to_order(order: Order) -> OrderResponse:
    return OrderResponse(
        order_id=order.id,
        name=order.member.name,
        order_date=order.order_date,
        order_status=order.status,
        address=AddressResponse.model_validate(order.delivery.address),
        order_items=[
            OrderItemResponse(
                item_name=order_item.item.name,
                order_price=order_item.order_price,
                count=order_item.count,
            )
            for order_item in order.order_items
        ],
    )


def to_order_entity(order: Order, *, with_items: bool) -> OrderEntityResponse:
    """Entity-shaped payload; lines and total only when they were loaded."""
    order_items = None
    total_price = None
    if with_items:
        order_items = [OrderItemEntityResponse.model_validate(line) for line in order.order_items]
        total_price = order.total_price
    return OrderEntityResponse(
        id=order.id,
        member=MemberResponse.model_validate(order.member),
        delivery=DeliveryResponse.model_validate(order.delivery),
        order_date=order.order_date,
        status=order.status,
        order_items=order_items,
        total_price=total_price,
    )


def to_order_query(record: OrderQueryRecord) -> OrderQueryResponse:
    return OrderQueryResponse.model_validate(record)


# ============================================================================
# Simple orders (to-one associations only)
# ============================================================================


async def simple_order_entities(db: AsyncSession) -> list[OrderEntityResponse]:
    """Entities walked row by row, returned in entity shape."""
    orders = await order_repo.find_all_traversed(db)
    return [to_order_entity(order, with_items=False) for order in orders]


async def simple_orders_traversed(db: AsyncSession) -> list[SimpleOrderResponse]:
    """Entities walked row by row: 1 + 2N statements."""
    orders = await order_repo.find_all_traversed(db)
    return [to_simple_order(order) for order in orders]


async def simple_orders_fetch_join(db: AsyncSession) -> list[SimpleOrderResponse]:
    """Member and delivery fetch-joined: one statement."""
    orders = await order_repo.find_all_with_member_delivery(db)
    return [to_simple_order(order) for order in orders]


async def simple_orders_projection(db: AsyncSession) -> list[SimpleOrderResponse]:
    """Columns selected straight into rows: one statement, narrowest select list."""
    rows = await order_query_repo.find_simple_order_rows(db)
    return [SimpleOrderResponse.model_validate(row) for row in rows]


# ============================================================================
# Orders with items
# ============================================================================


async def order_entities(db: AsyncSession) -> list[OrderEntityResponse]:
    orders = await order_repo.find_all_traversed(db, with_items=True)
    return [to_order_entity(order, with_items=True) for order in orders]


async def orders_traversed(db: AsyncSession) -> list[OrderResponse]:
    orders = await order_repo.find_all_traversed(db, with_items=True)
    return [to_order(order) for order in orders]


async def orders_fetch_join(db: AsyncSession) -> list[OrderResponse]:
    """Every association in one joined statement. Cannot be paged."""
    orders = await order_repo.find_all_with_items(db)
    return [to_order(order) for order in orders]


async def orders_batch_fetch(db: AsyncSession, *, batch_size: int) -> list[OrderResponse]:
    """To-one fetch join, order items loaded ``batch_size`` orders at a time."""
    orders = await order_repo.find_all_with_member_delivery_batched(db, batch_size=batch_size)
    return [to_order(order) for order in orders]


async def orders_projection(db: AsyncSession) -> list[OrderQueryResponse]:
    """Order projections plus one item query per order: 1 + N statements."""
    records = await order_query_repo.find_order_query_rows(db)
    return [to_order_query(record) for record in records]


async def orders_projection_optimized(db: AsyncSession) -> list[OrderQueryResponse]:
    """Order projections plus one ``IN`` query for all items: 2 statements."""
    records = await order_query_repo.find_order_query_rows_optimized(db)
    return [to_order_query(record) for record in records]


async def orders_projection_flat(db: AsyncSession) -> list[OrderQueryResponse]:
    """One joined statement grouped in memory. Cannot be paged by order."""
    records = await order_query_repo.find_order_query_rows_flat(db)
    logger.debug("Grouped flat rows into %d orders", len(records))
    return [to_order_query(record) for record in records]

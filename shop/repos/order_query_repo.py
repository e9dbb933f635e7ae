"""
Hand-written projection queries for the order endpoints.

These functions select exactly the columns one endpoint needs into the
records of ``shop.repos.projections``. They are the most efficient way to
read orders and the least reusable: each query is shaped for one response.
Kept apart from ``order_repo``, which only returns entities.
"""

import logging

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from shop.db.models import Delivery, Item, Member, Order, OrderItem
from shop.repos.common import data_access
from shop.repos.grouping import group_flat_rows, group_items_by_order_id
from shop.repos.projections import (
    OrderFlatRow,
    OrderItemQueryRecord,
    OrderQueryRecord,
    SimpleOrderRow,
)

logger = logging.getLogger(__name__)


def _order_columns() -> Select:
    return (
        select(Order.id, Member.name, Order.order_date, Order.status, Delivery.address)
        .join(Order.member)
        .join(Order.delivery)
    )


def _order_item_columns() -> Select:
    return select(OrderItem.order_id, Item.name, OrderItem.order_price, OrderItem.count).join(
        OrderItem.item
    )


async def _find_order_records(db: AsyncSession) -> list[OrderQueryRecord]:
    result = await db.execute(_order_columns().order_by(Order.id))
    return [
        OrderQueryRecord(
            order_id=order_id,
            name=name,
            order_date=order_date,
            order_status=status,
            address=address,
        )
        for order_id, name, order_date, status, address in result
    ]


async def _find_order_item_records(
    db: AsyncSession, order_ids: list[int]
) -> list[OrderItemQueryRecord]:
    stmt = (
        _order_item_columns()
        .where(OrderItem.order_id.in_(order_ids))
        .order_by(OrderItem.order_id, OrderItem.id)
    )
    result = await db.execute(stmt)
    return [
        OrderItemQueryRecord(order_id=order_id, item_name=name, order_price=price, count=count)
        for order_id, name, price, count in result
    ]


async def find_simple_order_rows(db: AsyncSession) -> list[SimpleOrderRow]:
    """Select order id, member name, date, status and delivery address. One statement."""
    with data_access("find_simple_order_rows"):
        result = await db.execute(_order_columns().order_by(Order.id))
        return [
            SimpleOrderRow(
                order_id=order_id,
                name=name,
                order_date=order_date,
                order_status=status,
                address=address,
            )
            for order_id, name, order_date, status, address in result
        ]


async def find_order_query_rows(db: AsyncSession) -> list[OrderQueryRecord]:
    """Order projections, then one item-projection statement per order (1 + N)."""
    with data_access("find_order_query_rows") as op:
        records = await _find_order_records(db)
        for record in records:
            record.order_items = await _find_order_item_records(db, [record.order_id])

    logger.debug("Projected %d orders with %d statements", len(records), op.statements)
    return records


async def find_order_query_rows_optimized(db: AsyncSession) -> list[OrderQueryRecord]:
    """Order projections, then the items of all of them in one ``IN`` statement.

    Items are bucketed by order id in memory. Two statements, or one when
    there are no orders.
    """
    with data_access("find_order_query_rows_optimized") as op:
        records = await _find_order_records(db)
        if records:
            items = await _find_order_item_records(db, [record.order_id for record in records])
            items_by_order = group_items_by_order_id(items)
            for record in records:
                record.order_items = items_by_order.get(record.order_id, [])

    logger.debug("Projected %d orders with %d statements", len(records), op.statements)
    return records


async def find_order_flat_rows(db: AsyncSession) -> list[OrderFlatRow]:
    """Join order, member, delivery, order item and item in one statement.

    One row per order item (one row with empty item columns for an order
    without items), ordered by order id then order item id.
    """
    stmt = (
        select(
            Order.id,
            Member.name,
            Order.order_date,
            Order.status,
            Delivery.address,
            Item.name,
            OrderItem.order_price,
            OrderItem.count,
        )
        .join(Order.member)
        .join(Order.delivery)
        .outerjoin(Order.order_items)
        .outerjoin(OrderItem.item)
        .order_by(Order.id, OrderItem.id)
    )
    with data_access("find_order_flat_rows"):
        result = await db.execute(stmt)
        return [
            OrderFlatRow(
                order_id=order_id,
                name=member_name,
                order_date=order_date,
                order_status=status,
                address=address,
                item_name=item_name,
                order_price=order_price,
                count=count,
            )
            for (
                order_id,
                member_name,
                order_date,
                status,
                address,
                item_name,
                order_price,
                count,
            ) in result
        ]


async def find_order_query_rows_flat(db: AsyncSession) -> list[OrderQueryRecord]:
    """Single joined statement folded into nested records by order id.

    The join multiplies rows per order item, so this cannot be paged by order.
    """
    return group_flat_rows(await find_order_flat_rows(db))

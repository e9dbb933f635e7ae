"""
Repository functions returning Order entities.

One function per loading strategy:

- ``find_all_traversed``: roots first, then each association of each row
  in its own statement (the N+1 pattern).
- ``find_all_with_member_delivery``: to-one fetch join, paginable.
- ``find_all_with_member_delivery_batched``: to-one fetch join, then the
  order items of up to ``batch_size`` orders per follow-up statement.
- ``find_all_with_items``: a single fetch join over every association.
  Not paginable: the collection join yields one row per order item.

Relationships are ``lazy="raise"``, so whatever a function does not load
cannot be reached by accident later.
"""

import logging
from collections import defaultdict
from itertools import batched

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload
from sqlalchemy.orm.attributes import set_committed_value

from shop.db.models import Delivery, Item, Member, Order, OrderItem
from shop.repos.common import check_batch_size, check_page, data_access

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


def _with_member_delivery(offset: int = 0, limit: int | None = None) -> Select:
    stmt = (
        select(Order)
        .options(
            joinedload(Order.member, innerjoin=True),
            joinedload(Order.delivery, innerjoin=True),
        )
        .order_by(Order.id)
    )
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


async def find_all(db: AsyncSession) -> list[Order]:
    """Load every order without any association."""
    with data_access("find_all"):
        result = await db.execute(select(Order).order_by(Order.id))
        return list(result.scalars())


async def find_all_traversed(db: AsyncSession, *, with_items: bool = False) -> list[Order]:
    """Load orders, then walk their associations one row at a time.

    Member and delivery are fetched per order with ``Session.get``, which
    skips the database when the identity map already holds the row (only
    while the loaded objects are still referenced: the map is weak). With
    ``with_items`` each order's lines are selected separately and each line's
    item fetched on its own. For M orders with distinct members, deliveries
    and items (K lines in total) this issues 1 + 2M statements, or
    1 + 3M + K with items.
    """
    with data_access("find_all_traversed") as op:
        result = await db.execute(select(Order).order_by(Order.id))
        orders = list(result.scalars())

        for order in orders:
            set_committed_value(order, "member", await db.get(Member, order.member_id))
            set_committed_value(order, "delivery", await db.get(Delivery, order.delivery_id))
            if not with_items:
                continue

            lines_result = await db.execute(
                select(OrderItem).where(OrderItem.order_id == order.id).order_by(OrderItem.id)
            )
            order_items = list(lines_result.scalars())
            for order_item in order_items:
                set_committed_value(order_item, "item", await db.get(Item, order_item.item_id))
            set_committed_value(order, "order_items", order_items)

    logger.debug(
        "Traversed %d orders with %d statements",
        len(orders),
        op.statements,
        extra={"with_items": with_items},
    )
    return orders


async def find_all_with_member_delivery(
    db: AsyncSession, *, offset: int = 0, limit: int | None = None
) -> list[Order]:
    """Load orders with member and delivery in one joined statement.

    Only to-one associations are joined, so one row per order comes back and
    offset/limit page by order.
    """
    check_page(offset, limit)
    with data_access("find_all_with_member_delivery"):
        result = await db.execute(_with_member_delivery(offset, limit))
        return list(result.scalars())


async def find_all_with_member_delivery_batched(
    db: AsyncSession,
    *,
    offset: int = 0,
    limit: int | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[Order]:
    """Load a page of orders, then their order items in batches.

    The first statement fetch-joins member and delivery. Order items (with
    their item joined) are then selected with ``order_id IN (...)`` for at
    most ``batch_size`` orders at a time, so M orders cost at most
    ceil(M / batch_size) + 1 statements.
    """
    check_page(offset, limit)
    check_batch_size(batch_size)

    with data_access("find_all_with_member_delivery_batched") as op:
        result = await db.execute(_with_member_delivery(offset, limit))
        orders = list(result.scalars())

        for chunk in batched(orders, batch_size):
            lines_result = await db.execute(
                select(OrderItem)
                .options(joinedload(OrderItem.item, innerjoin=True))
                .where(OrderItem.order_id.in_([order.id for order in chunk]))
                .order_by(OrderItem.order_id, OrderItem.id)
            )
            lines_by_order: dict[int, list[OrderItem]] = defaultdict(list)
            for order_item in lines_result.scalars():
                lines_by_order[order_item.order_id].append(order_item)
            for order in chunk:
                set_committed_value(order, "order_items", lines_by_order.get(order.id, []))

    logger.debug(
        "Loaded %d orders in batches of %d with %d statements",
        len(orders),
        batch_size,
        op.statements,
    )
    return orders


async def find_all_with_items(db: AsyncSession) -> list[Order]:
    """Load orders with every association in one statement.

    The order_item join repeats each order once per line; ``unique()``
    collapses the rows back to one Order per identity. Because of that
    multiplication the statement cannot be paged by order.
    """
    stmt = (
        select(Order)
        .options(
            joinedload(Order.member, innerjoin=True),
            joinedload(Order.delivery, innerjoin=True),
            joinedload(Order.order_items).joinedload(OrderItem.item, innerjoin=True),
        )
        .order_by(Order.id)
    )
    with data_access("find_all_with_items"):
        result = await db.execute(stmt)
        return list(result.unique().scalars())

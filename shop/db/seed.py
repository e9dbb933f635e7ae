"""
Sample dataset for local development and tests.

Two members each place one order for two books, delivered to their own
address.
"""

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shop.db.models import Address, Delivery, Item, Member, Order, OrderItem

logger = logging.getLogger(__name__)

# (member name, (city, street, zipcode), [(item name, price, count), ...])
SAMPLE_ORDERS: tuple[tuple[str, tuple[str, str, str], list[tuple[str, int, int]]], ...] = (
    ("userA", ("Seoul", "1", "1111"), [("JPA1 BOOK", 10000, 1), ("JPA2 BOOK", 20000, 2)]),
    ("userB", ("Busan", "2", "2222"), [("SPRING1 BOOK", 20000, 3), ("SPRING2 BOOK", 40000, 4)]),
)


def build_order(
    member_name: str,
    address: Address,
    lines: Sequence[tuple[str, int, int]],
) -> Order:
    """Build a transient order; each line gets its own Item priced at the line price."""
    member = Member(name=member_name, address=address)
    delivery = Delivery(address=address)
    order_items = [
        OrderItem.create(Item(name=name, price=price), price, count) for name, price, count in lines
    ]
    return Order.create(member, delivery, *order_items)


async def seed_sample_orders(db: AsyncSession) -> list[Order]:
    """Insert the sample orders and flush. The caller owns the transaction."""
    orders = [
        build_order(member_name, Address(*address), lines)
        for member_name, address, lines in SAMPLE_ORDERS
    ]
    db.add_all(orders)
    await db.flush()
    logger.info("Seeded %d sample orders", len(orders))
    return orders

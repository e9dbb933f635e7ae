"""
Projection records returned by the hand-written query repository.

Each record carries exactly the columns one endpoint needs. They are plain
dataclasses, independent of the ORM session that produced them.
"""

from dataclasses import dataclass, field
from datetime import datetime

from shop.db.models import Address
from shop.domain.enums import OrderStatus


@dataclass(frozen=True)
class SimpleOrderRow:
    order_id: int
    name: str
    order_date: datetime
    order_status: OrderStatus
    address: Address


@dataclass(frozen=True)
class OrderItemQueryRecord:
    order_id: int
    item_name: str
    order_price: int
    count: int


@dataclass
class OrderQueryRecord:
    """Order projection with its nested item projections."""

    order_id: int
    name: str
    order_date: datetime
    order_status: OrderStatus
    address: Address
    order_items: list[OrderItemQueryRecord] = field(default_factory=list)


@dataclass(frozen=True)
class OrderFlatRow:
    """
    One row of the order/member/delivery/order_item/item join.

    Order columns repeat once per order item. Item columns are None for an
    order without items (outer join).
    """

    order_id: int
    name: str
    order_date: datetime
    order_status: OrderStatus
    address: Address
    item_name: str | None
    order_price: int | None
    count: int | None

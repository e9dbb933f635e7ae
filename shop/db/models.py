"""
SQLAlchemy 2.x ORM models for the Shop Order API.

Models use the Mapped[] type annotation syntax and mapped_column.

Every relationship is declared ``lazy="raise"``: touching an association
that the query did not load raises instead of emitting a hidden SELECT.
Each repository function states how it loads what it returns.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    composite,
    mapped_column,
    relationship,
    validates,
)

from shop.domain.enums import DeliveryStatus, OrderStatus


class Base(DeclarativeBase):
    """Base class for all ORM models."""


@dataclass(frozen=True)
class Address:
    """Postal address value object, embedded in Member and Delivery rows."""

    city: str
    street: str
    zipcode: str


def _address_columns() -> tuple:
    return (
        mapped_column("city", String(100)),
        mapped_column("street", String(100)),
        mapped_column("zipcode", String(20)),
    )


class Member(Base):
    __tablename__ = "member"

    id: Mapped[int] = mapped_column("member_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[Address] = composite(*_address_columns())

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, name={self.name})>"


class Item(Base):
    __tablename__ = "item"

    id: Mapped[int] = mapped_column("item_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name={self.name}, price={self.price})>"


class Delivery(Base):
    __tablename__ = "delivery"

    id: Mapped[int] = mapped_column("delivery_id", Integer, primary_key=True)
    address: Mapped[Address] = composite(*_address_columns())
    status: Mapped[DeliveryStatus] = mapped_column(
        Enum(DeliveryStatus, native_enum=False, length=20, name="delivery_status"),
        nullable=False,
        default=DeliveryStatus.READY,
    )

    def __repr__(self) -> str:
        return f"<Delivery(id={self.id}, status={self.status})>"


class Order(Base):
    """
    Aggregate root: one member, one delivery, ordered line items.

    ``order_items`` is ordered by line id so every strategy sees the same
    sequence.
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column("order_id", Integer, primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("member.member_id"), nullable=False)
    delivery_id: Mapped[int] = mapped_column(
        ForeignKey("delivery.delivery_id"), nullable=False, unique=True
    )
    order_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, native_enum=False, length=20, name="order_status"), nullable=False
    )

    # Relationships
    member: Mapped[Member] = relationship(lazy="raise")
    delivery: Mapped[Delivery] = relationship(lazy="raise")
    order_items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        lazy="raise",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    @classmethod
    def create(cls, member: Member, delivery: Delivery, *order_items: "OrderItem") -> "Order":
        """Build a new ORDERED order placed now."""
        order = cls(
            member=member,
            delivery=delivery,
            status=OrderStatus.ORDERED,
            order_date=datetime.now(UTC),
        )
        for order_item in order_items:
            order.order_items.append(order_item)
        return order

    @property
    def total_price(self) -> int:
        return sum(order_item.total_price for order_item in self.order_items)

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, member_id={self.member_id}, status={self.status})>"


class OrderItem(Base):
    """Order line. Price and count are fixed once set."""

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column("order_item_id", Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.order_id"), nullable=False)
    item_id: Mapped[int] = mapped_column(ForeignKey("item.item_id"), nullable=False)
    order_price: Mapped[int] = mapped_column(Integer, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    order: Mapped[Order] = relationship(back_populates="order_items", lazy="raise")
    item: Mapped[Item] = relationship(lazy="raise")

    @classmethod
    def create(cls, item: Item, order_price: int, count: int) -> "OrderItem":
        return cls(item=item, order_price=order_price, count=count)

    @validates("order_price", "count")
    def _validate_immutable(self, key: str, value: int) -> int:
        if self.__dict__.get(key) is not None:
            raise ValueError(f"OrderItem.{key} cannot be changed once set")
        if value is None or value < 0:
            raise ValueError(f"OrderItem.{key} must be a non-negative integer")
        return value

    @property
    def total_price(self) -> int:
        return self.order_price * self.count

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, item_id={self.item_id})>"

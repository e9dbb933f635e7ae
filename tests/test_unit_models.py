"""Unit tests for the ORM models and the sample dataset."""

import pytest

from shop.db.models import Address, Delivery, Item, Member, Order, OrderItem
from shop.db.seed import SAMPLE_ORDERS, build_order
from shop.domain.enums import DeliveryStatus, OrderStatus
from shop.repos import order_repo


def _order():
    address = Address("Seoul", "1", "1111")
    return Order.create(
        Member(name="userA", address=address),
        Delivery(address=address),
        OrderItem.create(Item(name="JPA1 BOOK", price=10000), 10000, 1),
        OrderItem.create(Item(name="JPA2 BOOK", price=20000), 20000, 2),
    )


class TestOrderCreate:
    def test_new_order_is_ordered(self):
        order = _order()

        assert order.status == OrderStatus.ORDERED
        assert order.order_date.tzinfo is not None

    def test_lines_link_back_to_order(self):
        order = _order()

        assert [line.item.name for line in order.order_items] == ["JPA1 BOOK", "JPA2 BOOK"]
        assert all(line.order is order for line in order.order_items)

    def test_total_price(self):
        assert _order().total_price == 10000 * 1 + 20000 * 2


class TestOrderItem:
    def test_price_and_count_cannot_change(self):
        line = OrderItem.create(Item(name="X", price=1), 1, 1)

        with pytest.raises(ValueError, match="cannot be changed"):
            line.count = 5
        with pytest.raises(ValueError, match="cannot be changed"):
            line.order_price = 2

    def test_negative_values_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            OrderItem.create(Item(name="X", price=1), -1, 1)

    def test_total_price(self):
        assert OrderItem.create(Item(name="X", price=1), 300, 3).total_price == 900


class TestAddress:
    def test_value_equality(self):
        assert Address("Seoul", "1", "1111") == Address("Seoul", "1", "1111")

    def test_immutable(self):
        with pytest.raises(AttributeError):
            Address("Seoul", "1", "1111").city = "Busan"


class TestSampleOrders:
    def test_two_members_two_books_each(self):
        assert [name for name, _, _ in SAMPLE_ORDERS] == ["userA", "userB"]
        assert all(len(lines) == 2 for _, _, lines in SAMPLE_ORDERS)

    def test_build_order_uses_member_address_for_delivery(self):
        order = build_order("userB", Address("Busan", "2", "2222"), [("SPRING1 BOOK", 20000, 3)])

        assert order.delivery.address == order.member.address
        assert order.order_items[0].order_price == 20000

    @pytest.mark.anyio
    async def test_seeded_delivery_defaults_to_ready(self, db):
        orders = await order_repo.find_all_with_member_delivery(db)

        assert {o.delivery.status for o in orders} == {DeliveryStatus.READY}

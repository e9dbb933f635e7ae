"""
Tests for the entity repository (shop.repos.order_repo).

Runs against in-memory SQLite. Statement counts are measured with
track_queries() around each call on a session whose identity map is empty.

Tests cover:
- Each loading strategy returns the seeded aggregate
- Statement count per strategy
- Associations a strategy did not load raise instead of querying
- Argument validation and driver error translation
"""

import math
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import InvalidRequestError, OperationalError

from shop.core.errors import DataAccessError, ValidationError
from shop.core.query_stats import track_queries
from shop.db.models import Address
from shop.domain.enums import DeliveryStatus, OrderStatus
from shop.repos import order_repo


def _lines(order):
    return [(line.item.name, line.order_price, line.count) for line in order.order_items]


# ============================================================================
# Plain load
# ============================================================================


class TestFindAll:
    @pytest.mark.anyio
    async def test_returns_orders_in_id_order(self, db, seeded):
        orders = await order_repo.find_all(db)

        assert [o.id for o in orders] == sorted(seeded)
        assert all(o.status == OrderStatus.ORDERED for o in orders)

    @pytest.mark.anyio
    async def test_unloaded_associations_raise(self, db):
        orders = await order_repo.find_all(db)

        with pytest.raises(InvalidRequestError):
            orders[0].member
        with pytest.raises(InvalidRequestError):
            orders[0].order_items


# ============================================================================
# Row-by-row traversal (N+1)
# ============================================================================


class TestFindAllTraversed:
    @pytest.mark.anyio
    async def test_to_one_associations_loaded(self, db):
        orders = await order_repo.find_all_traversed(db)

        assert [o.member.name for o in orders] == ["userA", "userB"]
        assert orders[0].delivery.address == Address("Seoul", "1", "1111")
        assert orders[1].delivery.status == DeliveryStatus.READY

    @pytest.mark.anyio
    async def test_one_plus_two_statements_per_order(self, db):
        with track_queries() as counter:
            orders = await order_repo.find_all_traversed(db)

        assert counter.count == 1 + 2 * len(orders)

    @pytest.mark.anyio
    async def test_items_not_loaded_without_flag(self, db):
        orders = await order_repo.find_all_traversed(db)

        with pytest.raises(InvalidRequestError):
            orders[0].order_items

    @pytest.mark.anyio
    async def test_with_items_loads_lines_and_items(self, db):
        orders = await order_repo.find_all_traversed(db, with_items=True)

        assert _lines(orders[0]) == [("JPA1 BOOK", 10000, 1), ("JPA2 BOOK", 20000, 2)]
        assert _lines(orders[1]) == [("SPRING1 BOOK", 20000, 3), ("SPRING2 BOOK", 40000, 4)]

    @pytest.mark.anyio
    async def test_with_items_statement_count(self, db):
        with track_queries() as counter:
            orders = await order_repo.find_all_traversed(db, with_items=True)

        line_count = sum(len(o.order_items) for o in orders)
        # roots + (member, delivery, lines) per order + one item per line
        assert counter.count == 1 + 3 * len(orders) + line_count
        assert counter.count == 11

    @pytest.mark.anyio
    async def test_second_pass_hits_identity_map(self, db):
        # Members and deliveries stay in the identity map only while the
        # first pass's objects are referenced; the second pass then issues
        # just the root select.
        first = await order_repo.find_all_traversed(db)

        with track_queries() as counter:
            second = await order_repo.find_all_traversed(db)

        assert counter.count == 1
        assert [o.member for o in second] == [o.member for o in first]


# ============================================================================
# To-one fetch join
# ============================================================================


class TestFindAllWithMemberDelivery:
    @pytest.mark.anyio
    async def test_single_statement(self, db):
        with track_queries() as counter:
            orders = await order_repo.find_all_with_member_delivery(db)

        assert counter.count == 1
        assert [o.member.name for o in orders] == ["userA", "userB"]
        assert orders[1].delivery.address.city == "Busan"

    @pytest.mark.anyio
    async def test_collection_not_loaded(self, db):
        orders = await order_repo.find_all_with_member_delivery(db)

        with pytest.raises(InvalidRequestError):
            orders[0].order_items

    @pytest.mark.anyio
    async def test_offset_and_limit_page_by_order(self, db, seeded):
        page = await order_repo.find_all_with_member_delivery(db, offset=1, limit=1)

        assert [o.id for o in page] == [sorted(seeded)[1]]

    @pytest.mark.anyio
    async def test_negative_offset_rejected(self, db):
        with pytest.raises(ValidationError) as exc_info:
            await order_repo.find_all_with_member_delivery(db, offset=-1)

        assert exc_info.value.details == {"offset": -1}

    @pytest.mark.anyio
    async def test_zero_limit_rejected(self, db):
        with pytest.raises(ValidationError):
            await order_repo.find_all_with_member_delivery(db, limit=0)


# ============================================================================
# To-one fetch join + batched collection
# ============================================================================


class TestFindAllWithMemberDeliveryBatched:
    @pytest.mark.anyio
    async def test_loads_full_aggregate(self, db):
        orders = await order_repo.find_all_with_member_delivery_batched(db)

        assert [o.member.name for o in orders] == ["userA", "userB"]
        assert _lines(orders[0]) == [("JPA1 BOOK", 10000, 1), ("JPA2 BOOK", 20000, 2)]
        assert orders[1].total_price == 20000 * 3 + 40000 * 4

    @pytest.mark.anyio
    async def test_two_statements_when_all_orders_fit_one_batch(self, db):
        with track_queries() as counter:
            await order_repo.find_all_with_member_delivery_batched(db)

        assert counter.count == 2

    @pytest.mark.anyio
    async def test_statement_bound_with_small_batches(self, add_orders, db):
        await add_orders(10)

        with track_queries() as counter:
            orders = await order_repo.find_all_with_member_delivery_batched(db, batch_size=5)

        assert len(orders) == 12
        assert counter.count <= math.ceil(len(orders) / 5) + 1
        assert all(len(o.order_items) == 2 for o in orders)

    @pytest.mark.anyio
    async def test_page_then_batch(self, add_orders, db):
        await add_orders(4)

        with track_queries() as counter:
            orders = await order_repo.find_all_with_member_delivery_batched(
                db, offset=2, limit=3, batch_size=2
            )

        assert len(orders) == 3
        assert counter.count == 1 + 2
        assert [o.member.name for o in orders] == ["member-0", "member-1", "member-2"]

    @pytest.mark.anyio
    async def test_order_without_lines_gets_empty_collection(self, add_orders, db):
        await add_orders(1, lines_per_order=0)

        orders = await order_repo.find_all_with_member_delivery_batched(db)

        assert orders[-1].order_items == []
        assert orders[-1].total_price == 0

    @pytest.mark.anyio
    async def test_zero_batch_size_rejected(self, db):
        with pytest.raises(ValidationError) as exc_info:
            await order_repo.find_all_with_member_delivery_batched(db, batch_size=0)

        assert exc_info.value.details == {"batch_size": 0}

    @pytest.mark.anyio
    async def test_empty_database_issues_only_root_query(self, empty_db):
        with track_queries() as counter:
            orders = await order_repo.find_all_with_member_delivery_batched(empty_db)

        assert orders == []
        assert counter.count == 1


# ============================================================================
# Fetch join over every association
# ============================================================================


class TestFindAllWithItems:
    @pytest.mark.anyio
    async def test_single_statement_one_order_per_identity(self, db):
        with track_queries() as counter:
            orders = await order_repo.find_all_with_items(db)

        assert counter.count == 1
        assert [o.id for o in orders] == sorted({o.id for o in orders})
        assert len(orders) == 2

    @pytest.mark.anyio
    async def test_lines_in_line_id_order(self, db):
        orders = await order_repo.find_all_with_items(db)

        assert _lines(orders[0]) == [("JPA1 BOOK", 10000, 1), ("JPA2 BOOK", 20000, 2)]
        assert orders[0].total_price == 10000 + 40000


# ============================================================================
# Error translation
# ============================================================================


class TestDataAccessErrors:
    @pytest.mark.anyio
    async def test_driver_error_becomes_data_access_error(self):
        mock_db = MagicMock()
        mock_db.execute = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("connection lost"))
        )

        with pytest.raises(DataAccessError) as exc_info:
            await order_repo.find_all_with_items(mock_db)

        assert exc_info.value.details == {
            "operation": "find_all_with_items",
            "error": "OperationalError",
        }
        assert isinstance(exc_info.value.__cause__, OperationalError)

    @pytest.mark.anyio
    async def test_failure_is_not_retried(self):
        mock_db = MagicMock()
        mock_db.execute = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("connection lost"))
        )

        with pytest.raises(DataAccessError):
            await order_repo.find_all_traversed(mock_db)

        assert mock_db.execute.call_count == 1

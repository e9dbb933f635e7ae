"""
In-memory folds from flat query rows to nested order records.

Pure functions: no session, no SQL. The query that produced the rows decides
their order; these helpers never re-sort.
"""

from collections import defaultdict
from collections.abc import Iterable

from shop.repos.projections import OrderFlatRow, OrderItemQueryRecord, OrderQueryRecord


def group_flat_rows(rows: Iterable[OrderFlatRow]) -> list[OrderQueryRecord]:
    """
    Fold joined rows into one record per order id.

    Orders are returned in order of first appearance. Each order's items are
    appended in row order. A row without item columns (order with no items)
    yields the order with an empty item list.
    """
    grouped: dict[int, OrderQueryRecord] = {}
    for row in rows:
        record = grouped.get(row.order_id)
        if record is None:
            record = OrderQueryRecord(
                order_id=row.order_id,
                name=row.name,
                order_date=row.order_date,
                order_status=row.order_status,
                address=row.address,
            )
            grouped[row.order_id] = record
        if row.item_name is None:
            continue
        record.order_items.append(
            OrderItemQueryRecord(
                order_id=row.order_id,
                item_name=row.item_name,
                order_price=row.order_price,
                count=row.count,
            )
        )
    return list(grouped.values())


def group_items_by_order_id(
    items: Iterable[OrderItemQueryRecord],
) -> dict[int, list[OrderItemQueryRecord]]:
    """Bucket item records by their order id, keeping input order per bucket."""
    buckets: dict[int, list[OrderItemQueryRecord]] = defaultdict(list)
    for item in items:
        buckets[item.order_id].append(item)
    return dict(buckets)

"""
Per-request SQL statement counting.

Each request (or test) opens a tracking scope with ``track_queries()``. A
SQLAlchemy ``before_cursor_execute`` listener attributes every statement the
engine sends to the innermost open scope, and to each enclosing scope.

The active scope lives in a ContextVar, so concurrent requests never share a
counter. SQLAlchemy's async layer carries the caller's context into the
greenlet that runs the DBAPI call, which is what lets the listener see it.

Usage:
    with track_queries() as counter:
        orders = await find_all_with_items(db)
    logger.info("issued %d statements", counter.count)
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_counter_ctx: ContextVar["QueryCounter | None"] = ContextVar("query_counter", default=None)


class QueryCounter:
    """Counts statements issued while a tracking scope is open."""

    def __init__(self, parent: "QueryCounter | None" = None) -> None:
        self.parent = parent
        self.count = 0
        self.statements: list[str] = []

    def record(self, statement: str) -> None:
        self.count += 1
        self.statements.append(statement)
        if self.parent is not None:
            self.parent.record(statement)

    def __repr__(self) -> str:
        return f"<QueryCounter(count={self.count})>"


def current_counter() -> QueryCounter | None:
    """Return the innermost open counter, if any."""
    return _counter_ctx.get()


@contextmanager
def track_queries() -> Iterator[QueryCounter]:
    """Open a statement-counting scope for the current context."""
    counter = QueryCounter(parent=_counter_ctx.get())
    token = _counter_ctx.set(counter)
    try:
        yield counter
    finally:
        _counter_ctx.reset(token)


def _before_cursor_execute(
    conn: Any,
    cursor: Any,
    statement: str,
    parameters: Any,
    context: Any,
    executemany: bool,
) -> None:
    counter = _counter_ctx.get()
    if counter is not None:
        counter.record(statement)


def install_query_counter(engine: Any) -> None:
    """
    Attach the statement listener to an engine.

    Accepts a sync Engine or an AsyncEngine; async engines expose their
    event target as ``sync_engine``. Installing twice is a no-op.
    """
    target: Engine = getattr(engine, "sync_engine", engine)
    if event.contains(target, "before_cursor_execute", _before_cursor_execute):
        return
    event.listen(target, "before_cursor_execute", _before_cursor_execute)
    logger.debug("Query counter installed on %s", target.url.render_as_string(hide_password=True))

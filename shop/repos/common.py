"""
Common repository functions shared across the order repositories.

All query functions are async - use AsyncSession from SQLAlchemy.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from shop.core.errors import DataAccessError, ValidationError
from shop.core.observability import db_metrics

__all__ = [
    "data_access",
    "check_page",
    "check_batch_size",
]

logger = logging.getLogger(__name__)


@contextmanager
def data_access(operation: str) -> Iterator:
    """Track a repository operation and translate driver failures.

    Any SQLAlchemy error raised inside the block is re-raised as
    DataAccessError with the original exception chained. Nothing is retried.

    Args:
        operation: Name used for metrics and logs (e.g. "find_all_with_items")

    Yields:
        Operation handle; ``statements`` holds the statement count once the
        block exits
    """
    with db_metrics.track(operation) as op:
        try:
            yield op
        except SQLAlchemyError as e:
            logger.error(
                "Query failed in %s: %s",
                operation,
                type(e).__name__,
                extra={"operation": operation},
            )
            raise DataAccessError(
                "Failed to load orders",
                details={"operation": operation, "error": type(e).__name__},
            ) from e


def check_page(offset: int, limit: int | None) -> None:
    """Validate offset/limit pagination arguments.

    Raises:
        ValidationError: If offset is negative or limit is below 1
    """
    if offset < 0:
        raise ValidationError("offset must be >= 0", details={"offset": offset})
    if limit is not None and limit < 1:
        raise ValidationError("limit must be >= 1", details={"limit": limit})


def check_batch_size(batch_size: int) -> None:
    """Validate a batch fetch size.

    Raises:
        ValidationError: If batch_size is below 1
    """
    if batch_size < 1:
        raise ValidationError("batch_size must be >= 1", details={"batch_size": batch_size})

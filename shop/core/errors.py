"""
Domain-specific exceptions for the Shop Order API.

These exceptions are mapped to HTTP status codes in the API layer.
"""

from typing import Any


class ShopError(Exception):
    """Base exception for all shop domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ShopError):
    """
    Raised when an argument fails validation.

    Examples:
    - Batch fetch size lower than 1
    - Negative pagination offset

    HTTP Status: 400 Bad Request
    """

    pass


class DataAccessError(ShopError):
    """
    Raised when a query fails in the database layer.

    Wraps the SQLAlchemy exception (available as ``__cause__``). Reads are
    never retried.

    HTTP Status: 500 Internal Server Error
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    ValidationError: 400,
    DataAccessError: 500,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)

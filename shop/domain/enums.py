"""
Domain enums for orders and deliveries.

Stored by name in the database and serialized by value in responses.
"""

from enum import Enum


class OrderStatus(str, Enum):
    """Lifecycle status of an order."""

    ORDERED = "ORDERED"
    CANCELED = "CANCELED"


class DeliveryStatus(str, Enum):
    """Shipping status of a delivery."""

    READY = "READY"
    COMP = "COMP"  # completed

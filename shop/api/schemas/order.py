"""Response payloads for the order endpoints.

Payloads hold only what the client needs. None of them mirrors the ORM
graph: there are no back references, so nothing can cycle on serialization.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from shop.domain.enums import DeliveryStatus, OrderStatus


class AddressResponse(BaseModel):
    city: str
    street: str
    zipcode: str

    model_config = ConfigDict(from_attributes=True)


class SimpleOrderResponse(BaseModel):
    """Order with its to-one data only."""

    order_id: int
    name: str
    order_date: datetime
    order_status: OrderStatus
    address: AddressResponse

    model_config = ConfigDict(from_attributes=True)


class OrderItemResponse(BaseModel):
    item_name: str
    order_price: int
    count: int


class OrderResponse(BaseModel):
    """Order with its lines, built from an entity."""

    order_id: int
    name: str
    order_date: datetime
    order_status: OrderStatus
    address: AddressResponse
    order_items: list[OrderItemResponse]


class OrderItemQueryResponse(BaseModel):
    order_id: int
    item_name: str
    order_price: int
    count: int

    model_config = ConfigDict(from_attributes=True)


class OrderQueryResponse(BaseModel):
    """Order with its lines, built from projection records."""

    order_id: int
    name: str
    order_date: datetime
    order_status: OrderStatus
    address: AddressResponse
    order_items: list[OrderItemQueryResponse] = []

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Entity-shaped payloads (v1 endpoints)
#
# These reproduce every persisted column of the aggregate, which ties the
# API to the table layout. Kept to show the cost of exposing entities.
# ---------------------------------------------------------------------------


class MemberResponse(BaseModel):
    id: int
    name: str
    address: AddressResponse

    model_config = ConfigDict(from_attributes=True)


class DeliveryResponse(BaseModel):
    id: int
    address: AddressResponse
    status: DeliveryStatus

    model_config = ConfigDict(from_attributes=True)


class ItemResponse(BaseModel):
    id: int
    name: str
    price: int

    model_config = ConfigDict(from_attributes=True)


class OrderItemEntityResponse(BaseModel):
    id: int
    item: ItemResponse
    order_price: int
    count: int
    total_price: int

    model_config = ConfigDict(from_attributes=True)


class OrderEntityResponse(BaseModel):
    id: int
    member: MemberResponse
    delivery: DeliveryResponse
    order_date: datetime
    status: OrderStatus
    order_items: list[OrderItemEntityResponse] | None = None
    total_price: int | None = None

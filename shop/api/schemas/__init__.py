"""
Pydantic schemas for API responses.
"""

# Re-export schemas for convenient imports.
from .order import AddressResponse as AddressResponse
from .order import OrderEntityResponse as OrderEntityResponse
from .order import OrderItemQueryResponse as OrderItemQueryResponse
from .order import OrderItemResponse as OrderItemResponse
from .order import OrderQueryResponse as OrderQueryResponse
from .order import OrderResponse as OrderResponse
from .order import SimpleOrderResponse as SimpleOrderResponse

"""
Domain layer for the order store.

- models: Pydantic models for orders, items and API input/output
- errors: domain-level exceptions
"""

from .models import (
    ErrorResponse,
    Order,
    OrderCount,
    OrderItem,
    OrderPage,
    StatusUpdate,
)
from .errors import (
    OrderStoreError,
    ValidationError,
    NotFoundError,
    StorageError,
    DatabaseConnectionError,
    SchemaError,
    QueryError,
    RowParseError,
    TransactionError,
)

__all__ = [
    "Order",
    "OrderItem",
    "OrderPage",
    "OrderCount",
    "StatusUpdate",
    "ErrorResponse",
    "OrderStoreError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "DatabaseConnectionError",
    "SchemaError",
    "QueryError",
    "RowParseError",
    "TransactionError",
]

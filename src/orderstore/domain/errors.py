# src/orderstore/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class OrderStoreError(Exception):
    """
    Base domain error.

    The API layer maps these to HTTP responses consistently.
    """
    message: str
    code: str = "ORDERSTORE_ERROR"
    details: Optional[dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message


@dataclass
class ValidationError(OrderStoreError):
    code: str = "VALIDATION_ERROR"


@dataclass
class NotFoundError(OrderStoreError):
    code: str = "NOT_FOUND"


@dataclass
class StorageError(OrderStoreError):
    """
    Any failure of the underlying database.

    Callers treat these as operation-level failures: the enclosing
    transaction has been rolled back and prior state is intact.
    """
    code: str = "STORAGE_ERROR"


@dataclass
class DatabaseConnectionError(StorageError):
    code: str = "CONNECTION_ERROR"


@dataclass
class SchemaError(StorageError):
    code: str = "SCHEMA_ERROR"


@dataclass
class QueryError(StorageError):
    code: str = "QUERY_ERROR"


@dataclass
class RowParseError(StorageError):
    code: str = "ROW_PARSE_ERROR"


@dataclass
class TransactionError(StorageError):
    code: str = "TRANSACTION_ERROR"

# src/orderstore/storage/__init__.py
"""
Storage layer for the order store (SQLite).

- db: connection factory, pragmas, transaction helpers, error mapping
- migrations: versioned schema steps + runner
- queries: pure SQL composition for listings
- codec: row <-> Order/OrderItem mapping
- repo: transactional data access operations
"""

from .db import SQLiteDB
from .migrations import apply_migrations, ensure_schema, schema_version
from .repo import OrderRepo

__all__ = ["SQLiteDB", "apply_migrations", "ensure_schema", "schema_version", "OrderRepo"]

# src/orderstore/api/__init__.py
"""
HTTP boundary for the order store (FastAPI).

- app: FastAPI instance + lifespan (schema bootstrap)
- routes: listOrders / saveOrder / updateStatus / deleteOrder / countOrders
- deps: per-request connection and repository
"""

from .app import app

__all__ = ["app"]

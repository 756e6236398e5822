# src/orderstore/storage/repo.py
from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Optional

from orderstore.domain.errors import NotFoundError
from orderstore.domain.models import Order, OrderItem
from orderstore.logging import get_logger

from .codec import item_from_row, item_params, order_from_row, order_params
from .db import begin_deferred, begin_immediate, commit, rollback, storage_errors
from .queries import (
    DEFAULT_SORT,
    ITEM_COLUMNS,
    ORDER_COLUMNS,
    SELECT_ITEMS_SQL,
    SELECT_ORDER_SQL,
    compose_count_orders,
    compose_list_orders,
)

_LOG = get_logger(__name__)

_UPSERT_ORDER_SQL = (
    f"INSERT OR REPLACE INTO orders ({', '.join(ORDER_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in ORDER_COLUMNS)});"
)
_INSERT_ITEM_SQL = (
    f"INSERT INTO order_items (order_no, {', '.join(ITEM_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in range(len(ITEM_COLUMNS) + 1))});"
)


@dataclass
class OrderRepo:
    """
    Repository encapsulating all SQL access to orders and their items.

    Important invariants:
    - An order is always read and written together with its full item set.
    - save_order replaces the whole aggregate in one BEGIN IMMEDIATE transaction.
    - Items come back ordered by sl_no; orders by created_date DESC by default.

    The connection is owned by the caller (see SQLiteDB.connection); the
    repository never closes it.
    """
    conn: sqlite3.Connection

    # -------------------------
    # Read operations
    # -------------------------

    def get_order(self, order_no: str) -> Order:
        with storage_errors("load order"):
            try:
                begin_deferred(self.conn)
                row = self.conn.execute(SELECT_ORDER_SQL, (order_no,)).fetchone()
                order = None if row is None else order_from_row(row, self._get_items(order_no))
                commit(self.conn)
            except Exception:
                rollback(self.conn)
                raise

        if order is None:
            raise NotFoundError(f"Order not found: {order_no}", details={"orderNo": order_no})
        return order

    def list_orders(
        self,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        *,
        status: Optional[str] = None,
        sort: str = DEFAULT_SORT,
        descending: bool = True,
    ) -> tuple[list[Order], int]:
        """
        Returns (orders, total).

        With page/page_size absent every order is returned; otherwise the
        1-based page window. `total` always counts every matching order, not
        just the page. Each order carries its items, loaded within the same
        read transaction so no order is returned with a stale item set.
        """
        sql, params = compose_list_orders(
            page, page_size, status=status, sort=sort, descending=descending
        )
        count_sql, count_params = compose_count_orders(status=status)

        with storage_errors("list orders"):
            try:
                begin_deferred(self.conn)
                total = self.conn.execute(count_sql, count_params).fetchone()["c"]
                rows = self.conn.execute(sql, params).fetchall()
                orders = [order_from_row(row, self._get_items(row["order_no"])) for row in rows]
                commit(self.conn)
            except Exception:
                rollback(self.conn)
                raise

        return orders, int(total)

    def count_orders(self, *, status: Optional[str] = None) -> int:
        sql, params = compose_count_orders(status=status)
        with storage_errors("count orders"):
            row = self.conn.execute(sql, params).fetchone()
        return int(row["c"])

    # -------------------------
    # Write operations
    # -------------------------

    def save_order(self, order: Order) -> None:
        """
        Upserts the order row and replaces its item set in a single transaction.

        Behavior:
        - INSERT OR REPLACE keyed by order_no
        - delete every stored item for order_no, then insert order.items
        - an empty item list leaves the order with no items
        """
        try:
            with storage_errors("save order"):
                try:
                    begin_immediate(self.conn)
                    self.conn.execute(_UPSERT_ORDER_SQL, order_params(order))
                    self.conn.execute("DELETE FROM order_items WHERE order_no = ?;", (order.order_no,))
                    self.conn.executemany(
                        _INSERT_ITEM_SQL,
                        [item_params(order.order_no, item) for item in order.items],
                    )
                    commit(self.conn)
                except Exception:
                    rollback(self.conn)
                    raise
        except Exception:
            _LOG.error("Saving order %s failed", order.order_no)
            raise

        _LOG.debug("Saved order %s with %d item(s)", order.order_no, len(order.items))

    def update_status(self, order_no: str, status: str) -> bool:
        """
        Sets the status of one order. Unknown order_no is a no-op.

        Returns whether a row matched.
        """
        with storage_errors("update status"):
            updated = self.conn.execute(
                "UPDATE orders SET status = ? WHERE order_no = ?;",
                (status, order_no),
            ).rowcount
        return updated > 0

    def delete_order(self, order_no: str) -> bool:
        """
        Deletes an order; its items go with it via ON DELETE CASCADE.
        Unknown order_no is a no-op. Returns whether a row was deleted.
        """
        with storage_errors("delete order"):
            deleted = self.conn.execute(
                "DELETE FROM orders WHERE order_no = ?;",
                (order_no,),
            ).rowcount
        if deleted:
            _LOG.debug("Deleted order %s", order_no)
        return deleted > 0

    # -------------------------
    # Helpers
    # -------------------------

    def _get_items(self, order_no: str) -> list[OrderItem]:
        rows = self.conn.execute(SELECT_ITEMS_SQL, (order_no,)).fetchall()
        return [item_from_row(r) for r in rows]

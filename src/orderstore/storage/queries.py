# src/orderstore/storage/queries.py
"""
Read-statement composition for order listings.

Everything here is pure: functions return SQL text and bound parameters,
they never touch a connection.
"""
from __future__ import annotations

import math
from typing import Optional

from orderstore.domain.errors import ValidationError

ORDER_COLUMNS: tuple[str, ...] = (
    "order_no",
    "date",
    "customer_name",
    "contact_person",
    "phone",
    "status",
    "machine_name",
    "subtotal",
    "gst",
    "total",
    "remarks",
    "delivery_note",
    "delivery_note_date",
    "buyer_order_no",
    "buyer_order_date",
    "created_date",
)

ITEM_COLUMNS: tuple[str, ...] = (
    "sl_no",
    "item_type",
    "qty",
    "length",
    "dia",
    "shore",
    "remarks",
    "rate",
    "amount",
)

DEFAULT_SORT = "created_date"

# Only these may be interpolated into ORDER BY.
SORTABLE_COLUMNS = frozenset({"created_date", "date", "order_no", "customer_name", "status"})

SELECT_ITEMS_SQL = (
    f"SELECT {', '.join(ITEM_COLUMNS)} FROM order_items "
    "WHERE order_no = ? ORDER BY sl_no ASC, id ASC;"
)

SELECT_ORDER_SQL = f"SELECT {', '.join(ORDER_COLUMNS)} FROM orders WHERE order_no = ?;"


def page_offset(page: int, page_size: int) -> int:
    """
    Zero-based row offset of a 1-based page.
    """
    validate_page(page, page_size)
    return (page - 1) * page_size


def total_pages(total: int, page_size: int) -> int:
    if page_size < 1:
        raise ValidationError("page_size must be >= 1", details={"page_size": page_size})
    return math.ceil(total / page_size)


def validate_page(page: int, page_size: int) -> None:
    if page < 1:
        raise ValidationError("page must be >= 1", details={"page": page})
    if page_size < 1:
        raise ValidationError("page_size must be >= 1", details={"page_size": page_size})


def compose_list_orders(
    page: Optional[int] = None,
    page_size: Optional[int] = None,
    *,
    status: Optional[str] = None,
    sort: str = DEFAULT_SORT,
    descending: bool = True,
) -> tuple[str, tuple]:
    """
    Builds the order listing statement.

    Both page and page_size absent -> every matching order. Both present ->
    LIMIT/OFFSET window. Supplying only one of them is a caller bug.

    order_no is the tie-breaker so equal sort keys page deterministically.
    """
    if sort not in SORTABLE_COLUMNS:
        raise ValidationError(
            f"Cannot sort orders by {sort!r}",
            details={"sort": sort, "allowed": sorted(SORTABLE_COLUMNS)},
        )
    if (page is None) != (page_size is None):
        raise ValidationError(
            "page and page_size must be given together",
            details={"page": page, "page_size": page_size},
        )

    direction = "DESC" if descending else "ASC"
    sql = f"SELECT {', '.join(ORDER_COLUMNS)} FROM orders"
    params: tuple = ()

    if status is not None:
        sql += " WHERE status = ?"
        params += (status,)

    sql += f" ORDER BY {sort} {direction}"
    if sort != "order_no":
        sql += f", order_no {direction}"

    if page is not None and page_size is not None:
        sql += " LIMIT ? OFFSET ?"
        params += (page_size, page_offset(page, page_size))

    return sql + ";", params


def compose_count_orders(*, status: Optional[str] = None) -> tuple[str, tuple]:
    if status is None:
        return "SELECT COUNT(*) AS c FROM orders;", ()
    return "SELECT COUNT(*) AS c FROM orders WHERE status = ?;", (status,)

# src/orderstore/storage/codec.py
"""
Row <-> entity mapping.

Nullable text columns read as "" when NULL or absent from the row (rows
written before the column existed). Numeric and required columns have no
fallback: a NULL there means a corrupt store and raises RowParseError.
"""
from __future__ import annotations

import sqlite3
from typing import Sequence

from orderstore.domain.errors import RowParseError
from orderstore.domain.models import Order, OrderItem


def _text(row: sqlite3.Row, column: str) -> str:
    if column not in row.keys():
        return ""
    value = row[column]
    return "" if value is None else str(value)


def _required_text(row: sqlite3.Row, column: str, table: str) -> str:
    value = row[column] if column in row.keys() else None
    if value is None:
        raise RowParseError(
            f"{table}.{column} is NULL",
            details={"table": table, "column": column},
        )
    return str(value)


def _number(row: sqlite3.Row, column: str, table: str) -> float:
    value = row[column] if column in row.keys() else None
    # bool is an int subclass but never a valid stored amount
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RowParseError(
            f"{table}.{column} must be numeric, got {value!r}",
            details={"table": table, "column": column},
        )
    return float(value)


def _integer(row: sqlite3.Row, column: str, table: str) -> int:
    value = _number(row, column, table)
    if not value.is_integer():
        raise RowParseError(
            f"{table}.{column} must be an integer, got {value!r}",
            details={"table": table, "column": column},
        )
    return int(value)


def item_from_row(row: sqlite3.Row) -> OrderItem:
    return OrderItem(
        sl_no=_integer(row, "sl_no", "order_items"),
        item_type=_text(row, "item_type"),
        qty=_number(row, "qty", "order_items"),
        length=_text(row, "length"),
        dia=_text(row, "dia"),
        shore=_text(row, "shore"),
        remarks=_text(row, "remarks"),
        rate=_number(row, "rate", "order_items"),
        amount=_number(row, "amount", "order_items"),
    )


def order_from_row(row: sqlite3.Row, items: Sequence[OrderItem]) -> Order:
    return Order(
        order_no=_required_text(row, "order_no", "orders"),
        date=_required_text(row, "date", "orders"),
        customer_name=_required_text(row, "customer_name", "orders"),
        contact_person=_text(row, "contact_person"),
        phone=_text(row, "phone"),
        status=_required_text(row, "status", "orders"),
        machine_name=_text(row, "machine_name"),
        items=list(items),
        subtotal=_number(row, "subtotal", "orders"),
        gst=_number(row, "gst", "orders"),
        total=_number(row, "total", "orders"),
        remarks=_text(row, "remarks"),
        delivery_note=_text(row, "delivery_note"),
        delivery_note_date=_text(row, "delivery_note_date"),
        buyer_order_no=_text(row, "buyer_order_no"),
        buyer_order_date=_text(row, "buyer_order_date"),
        created_date=_required_text(row, "created_date", "orders"),
    )


def order_params(order: Order) -> tuple:
    """
    Parameters for INSERT INTO orders, in ORDER_COLUMNS order.
    """
    return (
        order.order_no,
        order.date,
        order.customer_name,
        order.contact_person,
        order.phone,
        order.status,
        order.machine_name,
        order.subtotal,
        order.gst,
        order.total,
        order.remarks,
        order.delivery_note,
        order.delivery_note_date,
        order.buyer_order_no,
        order.buyer_order_date,
        order.created_date,
    )


def item_params(order_no: str, item: OrderItem) -> tuple:
    """
    Parameters for INSERT INTO order_items: order_no then ITEM_COLUMNS order.
    """
    return (
        order_no,
        item.sl_no,
        item.item_type,
        item.qty,
        item.length,
        item.dia,
        item.shore,
        item.remarks,
        item.rate,
        item.amount,
    )

# src/orderstore/api/deps.py
from __future__ import annotations

import sqlite3
from typing import Generator

from fastapi import Depends, Request

from orderstore.config import Settings
from orderstore.storage import OrderRepo, SQLiteDB


def get_settings(request: Request) -> Settings:
    """
    Per-request access to settings stored on app.state during startup.
    """
    return request.app.state.settings  # type: ignore[attr-defined]


def get_db(request: Request) -> SQLiteDB:
    return request.app.state.db  # type: ignore[attr-defined]


def get_conn(
    db: SQLiteDB = Depends(get_db),
) -> Generator[sqlite3.Connection, None, None]:
    """
    Provides a per-request SQLite connection, closed on every exit path.
    """
    with db.connection() as conn:
        yield conn


def get_repo(
    conn: sqlite3.Connection = Depends(get_conn),
) -> OrderRepo:
    return OrderRepo(conn)

# src/orderstore/storage/db.py
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from orderstore.domain.errors import (
    DatabaseConnectionError,
    QueryError,
    StorageError,
    TransactionError,
)
from orderstore.logging import SQL_LOGGER_NAME, get_logger, sql_trace_enabled

_SQL_LOG = get_logger(SQL_LOGGER_NAME)


@dataclass(frozen=True)
class SQLiteDB:
    """
    SQLite connection factory.

    Notes:
    - One connection per request/repository, never used concurrently.
    - Pragmas are applied on each connection. Foreign keys are off by default
      in SQLite, and ON DELETE CASCADE on order_items depends on them.
    - The default rollback journal keeps the store to a single file.
    """
    db_path: Path
    timeout_s: float = 5.0

    def connect(self) -> sqlite3.Connection:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                str(self.db_path),
                timeout=self.timeout_s,
                isolation_level=None,          # we manage transactions manually (BEGIN/COMMIT)
                # FastAPI may run a request's dependency and handler on different
                # threadpool workers; the connection is still used by one request at a time.
                check_same_thread=False,
            )
        except (OSError, sqlite3.Error) as e:
            raise DatabaseConnectionError(
                f"Cannot open database {self.db_path}: {e}",
                details={"db_path": str(self.db_path)},
            ) from e

        conn.row_factory = sqlite3.Row
        try:
            self._apply_pragmas(conn)
        except sqlite3.Error as e:
            # A malformed file only surfaces on first statement.
            conn.close()
            raise DatabaseConnectionError(
                f"Cannot use database {self.db_path}: {e}",
                details={"db_path": str(self.db_path)},
            ) from e

        if sql_trace_enabled():
            conn.set_trace_callback(_SQL_LOG.debug)
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """
        Scoped acquisition: the connection is closed on every exit path.
        """
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    def _apply_pragmas(self, conn: sqlite3.Connection) -> None:
        cur = conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.execute(f"PRAGMA busy_timeout={int(self.timeout_s * 1000)};")
        # Forces the header read so a non-database file fails here.
        cur.execute("PRAGMA schema_version;").fetchone()
        cur.close()


def begin_immediate(conn: sqlite3.Connection) -> None:
    """
    Begins a transaction that acquires a RESERVED lock immediately.
    A second writer (another process) blocks or fails here, not mid-write.
    """
    conn.execute("BEGIN IMMEDIATE;")


def begin_deferred(conn: sqlite3.Connection) -> None:
    """
    Begins a transaction in DEFERRED mode. Used for consistent multi-query reads.
    """
    conn.execute("BEGIN;")


def commit(conn: sqlite3.Connection) -> None:
    try:
        conn.execute("COMMIT;")
    except sqlite3.Error as e:
        raise TransactionError(f"Commit failed: {e}") from e


def rollback(conn: sqlite3.Connection) -> None:
    # BEGIN itself may have failed; there is nothing to undo then.
    if conn.in_transaction:
        conn.execute("ROLLBACK;")


def to_storage_error(e: sqlite3.Error, action: str) -> StorageError:
    """
    Maps a sqlite3 exception onto the typed storage error hierarchy.
    """
    message = f"Failed to {action}: {e}"
    if isinstance(e, sqlite3.IntegrityError):
        return TransactionError(message)
    if isinstance(e, (sqlite3.ProgrammingError, sqlite3.InterfaceError)):
        return QueryError(message)
    if isinstance(e, sqlite3.OperationalError):
        if "unable to open" in str(e):
            return DatabaseConnectionError(message)
        return QueryError(message)
    if isinstance(e, sqlite3.DatabaseError) and "not a database" in str(e):
        return DatabaseConnectionError(message)
    return StorageError(message)


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """
    Re-raises sqlite3 errors from the wrapped block as StorageError subclasses.
    """
    try:
        yield
    except sqlite3.Error as e:
        raise to_storage_error(e, action) from e

# src/orderstore/storage/migrations.py
from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Callable, Sequence

from orderstore.domain.errors import SchemaError, StorageError
from orderstore.logging import get_logger

from .db import begin_immediate, commit, rollback

_LOG = get_logger(__name__)


ORDERS_DDL = """
CREATE TABLE IF NOT EXISTS orders (
  order_no TEXT PRIMARY KEY,
  date TEXT NOT NULL,
  customer_name TEXT NOT NULL,
  contact_person TEXT,
  phone TEXT,
  status TEXT NOT NULL,
  machine_name TEXT,
  subtotal REAL NOT NULL,
  gst REAL NOT NULL,
  total REAL NOT NULL,
  remarks TEXT,
  delivery_note TEXT,
  delivery_note_date TEXT,
  buyer_order_no TEXT,
  buyer_order_date TEXT,
  created_date TEXT NOT NULL
);
"""

# {table} lets the same shape be created under a shadow name.
ORDER_ITEMS_DDL = """
CREATE TABLE IF NOT EXISTS {table} (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  order_no TEXT NOT NULL,
  sl_no INTEGER NOT NULL,
  item_type TEXT,
  qty REAL NOT NULL,
  length TEXT,
  dia TEXT,
  shore TEXT,
  remarks TEXT,
  rate REAL NOT NULL,
  amount REAL NOT NULL,
  FOREIGN KEY (order_no) REFERENCES orders(order_no) ON DELETE CASCADE
);
"""

ORDER_ITEMS_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_order_items_order_no ON order_items(order_no, sl_no);"
)

# Columns added to orders after the first release.
ORDER_HEADER_COLUMNS: tuple[tuple[str, str], ...] = (
    ("machine_name", "TEXT"),
    ("delivery_note", "TEXT"),
    ("delivery_note_date", "TEXT"),
    ("buyer_order_no", "TEXT"),
    ("buyer_order_date", "TEXT"),
)


@dataclass(frozen=True)
class Migration:
    """
    One versioned schema step.

    `apply` runs inside a transaction opened by the runner; it must not
    commit. Non-fatal steps that fail are rolled back, logged and retried on
    the next start instead of aborting startup.

    Steps that drop and recreate tables set `foreign_keys_off`: the runner
    disables enforcement around the transaction (the pragma is a no-op
    inside one) and reports violations with PRAGMA foreign_key_check.
    """
    version: int
    name: str
    apply: Callable[[sqlite3.Connection], None]
    fatal: bool = True
    foreign_keys_off: bool = False


@dataclass(frozen=True)
class RebuildTable:
    """
    Shadow-table rebuild: the way to drop or retype a column in SQLite.

    Creates `<table>_new` from `create_sql`, copies `keep_columns` across,
    drops the old table and renames the shadow into place. Columns the live
    table does not have are left to their defaults. A table whose columns
    already match `keep_columns` is left alone.

    Run it with foreign keys off: rows copied from a store that never
    enforced them may reference deleted parents, and dropping a parent
    table with enforcement on would cascade into its children.
    """
    table: str
    create_sql: str
    keep_columns: tuple[str, ...]
    indexes: tuple[str, ...] = field(default_factory=tuple)

    def __call__(self, conn: sqlite3.Connection) -> None:
        live = table_columns(conn, self.table)
        if not live:
            conn.execute(self.create_sql.format(table=self.table))
        elif set(live) == set(self.keep_columns):
            _LOG.debug("%s already in target shape", self.table)
        else:
            shadow = f"{self.table}_new"
            copy = [c for c in self.keep_columns if c in live]
            dropped = sorted(set(live) - set(self.keep_columns))
            if dropped:
                _LOG.info("Rebuilding %s without column(s): %s", self.table, ", ".join(dropped))

            conn.execute(f"DROP TABLE IF EXISTS {shadow};")
            conn.execute(self.create_sql.format(table=shadow))
            cols = ", ".join(copy)
            conn.execute(f"INSERT INTO {shadow} ({cols}) SELECT {cols} FROM {self.table};")
            conn.execute(f"DROP TABLE {self.table};")
            conn.execute(f"ALTER TABLE {shadow} RENAME TO {self.table};")

        for ddl in self.indexes:
            conn.execute(ddl)


def _create_base_tables(conn: sqlite3.Connection) -> None:
    conn.execute(ORDERS_DDL)
    conn.execute(ORDER_ITEMS_DDL.format(table="order_items"))


def _add_order_header_columns(conn: sqlite3.Connection) -> None:
    for column, decl in ORDER_HEADER_COLUMNS:
        try:
            conn.execute(f"ALTER TABLE orders ADD COLUMN {column} {decl};")
        except sqlite3.OperationalError as e:
            if "duplicate column name" not in str(e).lower():
                raise
            _LOG.debug("orders.%s already present", column)


def _create_indexes(conn: sqlite3.Connection) -> None:
    conn.execute("CREATE INDEX IF NOT EXISTS idx_order_status ON orders(status);")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_order_date ON orders(date);")
    conn.execute(ORDER_ITEMS_INDEX_DDL)


MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "base_tables", _create_base_tables),
    Migration(2, "order_header_columns", _add_order_header_columns, fatal=False),
    Migration(
        3,
        "drop_order_item_machine",
        RebuildTable(
            table="order_items",
            create_sql=ORDER_ITEMS_DDL,
            keep_columns=(
                "id", "order_no", "sl_no", "item_type", "qty",
                "length", "dia", "shore", "remarks", "rate", "amount",
            ),
            indexes=(ORDER_ITEMS_INDEX_DDL,),
        ),
        foreign_keys_off=True,
    ),
    Migration(4, "order_indexes", _create_indexes),
)


def ensure_schema(conn: sqlite3.Connection) -> list[int]:
    """
    Brings the store up to the current schema. Safe to call on every start.
    """
    return apply_migrations(conn, MIGRATIONS)


def apply_migrations(conn: sqlite3.Connection, migrations: Sequence[Migration]) -> list[int]:
    """
    Applies migrations in ascending version order, each in its own
    BEGIN IMMEDIATE transaction together with its schema_migrations row.

    A store with no schema_migrations table (created before versioning)
    runs every step; each step is written to tolerate that.

    Returns the versions applied by this call.
    """
    _check_versions(migrations)

    try:
        _ensure_migrations_table(conn)
        applied = _get_applied_versions(conn)
    except sqlite3.Error as e:
        raise SchemaError(f"Cannot read schema version: {e}") from e

    to_apply = sorted((m for m in migrations if m.version not in applied), key=lambda m: m.version)
    if not to_apply:
        _LOG.info("No pending migrations.")
        return []

    _LOG.info("Applying %d migration(s)...", len(to_apply))
    done: list[int] = []
    for m in to_apply:
        _LOG.info("Applying migration %03d (%s)", m.version, m.name)
        try:
            if m.foreign_keys_off:
                conn.execute("PRAGMA foreign_keys=OFF;")
            begin_immediate(conn)
            m.apply(conn)
            if m.foreign_keys_off:
                _report_foreign_key_violations(conn, m)
            conn.execute(
                "INSERT INTO schema_migrations(version, name, applied_at) VALUES (?, ?, strftime('%s','now')*1000);",
                (m.version, m.name),
            )
            commit(conn)
        except (sqlite3.Error, StorageError) as e:
            rollback(conn)
            if m.fatal:
                raise SchemaError(
                    f"Migration {m.version:03d} ({m.name}) failed: {e}",
                    details={"version": m.version, "name": m.name},
                ) from e
            _LOG.warning("Migration %03d (%s) failed, will retry on next start: %s", m.version, m.name, e)
            continue
        finally:
            if m.foreign_keys_off:
                conn.execute("PRAGMA foreign_keys=ON;")
        done.append(m.version)

    _LOG.info("Schema at version %d.", schema_version(conn))
    return done


def schema_version(conn: sqlite3.Connection) -> int:
    if not table_columns(conn, "schema_migrations"):
        return 0
    row = conn.execute("SELECT MAX(version) AS v FROM schema_migrations;").fetchone()
    return int(row["v"] or 0)


def table_columns(conn: sqlite3.Connection, table: str) -> list[str]:
    rows = conn.execute(f"PRAGMA table_info({table});").fetchall()
    return [r["name"] for r in rows]


def _report_foreign_key_violations(conn: sqlite3.Connection, m: Migration) -> None:
    """
    Logs rows whose parent is missing. They are kept as they were: stores
    written without enforcement can hold items of deleted orders, and a
    migration must not change the row count.
    """
    rows = conn.execute("PRAGMA foreign_key_check;").fetchall()
    if not rows:
        return
    by_table: dict[str, int] = {}
    for r in rows:
        by_table[r["table"]] = by_table.get(r["table"], 0) + 1
    for table, count in sorted(by_table.items()):
        _LOG.warning(
            "Migration %03d (%s): %d %s row(s) reference a missing parent; kept as-is",
            m.version,
            m.name,
            count,
            table,
        )


def _check_versions(migrations: Sequence[Migration]) -> None:
    versions = [m.version for m in migrations]
    if len(versions) != len(set(versions)):
        raise ValueError(f"Duplicate migration versions: {versions}")


def _ensure_migrations_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations(
          version INTEGER PRIMARY KEY,
          name TEXT NOT NULL,
          applied_at INTEGER NOT NULL
        );
        """
    )


def _get_applied_versions(conn: sqlite3.Connection) -> set[int]:
    rows = conn.execute("SELECT version FROM schema_migrations ORDER BY version;").fetchall()
    return {int(r["version"]) for r in rows}

# tests/conftest.py
import importlib
import itertools
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import pytest
from fastapi.testclient import TestClient

from orderstore.domain.models import Order, OrderItem
from orderstore.storage import OrderRepo, SQLiteDB, ensure_schema

_counter = itertools.count(1)

DEFAULT_ENV = {
    "ORDERSTORE_DEFAULT_PAGE_SIZE": "50",
    "ORDERSTORE_MAX_PAGE_SIZE": "200",
    "ORDERSTORE_LOG_LEVEL": "warning",
}


def make_item(sl_no: int, **overrides) -> OrderItem:
    fields = {
        "sl_no": sl_no,
        "item_type": "Roller",
        "qty": 2.0,
        "length": "1200mm",
        "dia": "80mm",
        "shore": "70A",
        "remarks": "",
        "rate": 150.0,
        "amount": 300.0,
    }
    fields.update(overrides)
    return OrderItem(**fields)


def make_order(order_no: str, *, items: Optional[list[OrderItem]] = None, **overrides) -> Order:
    fields = {
        "order_no": order_no,
        "date": "2024-03-01",
        "customer_name": "Acme Prints",
        "contact_person": "R. Iyer",
        "phone": "+91 98450 00000",
        "status": "New",
        "machine_name": "Heidelberg SM52",
        "items": items if items is not None else [make_item(1), make_item(2, qty=1.0, amount=150.0)],
        "subtotal": 450.0,
        "gst": 81.0,
        "total": 531.0,
        "remarks": "urgent",
        "delivery_note": "DN-17",
        "delivery_note_date": "2024-03-05",
        "buyer_order_no": "PO-9",
        "buyer_order_date": "2024-02-28",
        "created_date": "2024-03-01T10:00:00",
    }
    fields.update(overrides)
    return Order(**fields)


@pytest.fixture()
def db(tmp_path: Path) -> SQLiteDB:
    """
    A migrated store in a fresh file.
    """
    db = SQLiteDB(tmp_path / f"orders_{next(_counter)}.db")
    with db.connection() as conn:
        ensure_schema(conn)
    return db


@pytest.fixture()
def repo(db: SQLiteDB) -> Iterator[OrderRepo]:
    with db.connection() as conn:
        yield OrderRepo(conn)


def _apply_env(monkeypatch: pytest.MonkeyPatch, db_path: Path, overrides: Optional[dict[str, str]] = None) -> None:
    monkeypatch.setenv("ORDERSTORE_DB_PATH", str(db_path))
    for k, v in DEFAULT_ENV.items():
        monkeypatch.setenv(k, v)
    if overrides:
        for k, v in overrides.items():
            monkeypatch.setenv(k, v)


@contextmanager
def _client_ctx(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, *, overrides: Optional[dict[str, str]] = None,
                db_path: Optional[Path] = None) -> Iterator[TestClient]:
    # Unique DB per client instance unless one is provided
    if db_path is None:
        db_path = tmp_path / f"orders_{next(_counter)}.db"

    _apply_env(monkeypatch, db_path, overrides)

    # Import after env is set; reload to avoid cross-test state
    app_mod = importlib.import_module("orderstore.api.app")
    importlib.reload(app_mod)

    with TestClient(app_mod.app) as client:
        yield client


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """
    Default integration test client.
    Uses DEFAULT_ENV and a fresh sqlite db per test.
    """
    with _client_ctx(monkeypatch, tmp_path) as c:
        yield c


@pytest.fixture()
def client_factory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """
    Factory for tests that need custom settings or a pre-populated DB.

    Usage:
      with client_factory(overrides={"ORDERSTORE_DEFAULT_PAGE_SIZE": "10"}) as client:
          ...
    """

    def _make(*, overrides: Optional[dict[str, str]] = None, db_path: Optional[Path] = None):
        return _client_ctx(monkeypatch, tmp_path, overrides=overrides, db_path=db_path)

    return _make

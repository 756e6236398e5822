# tests/test_api.py
import pytest
from fastapi.testclient import TestClient


def _order_payload(order_no: str, created: str = "2024-03-01T10:00:00", **overrides) -> dict:
    payload = {
        "orderNo": order_no,
        "date": "2024-03-01",
        "customerName": "Acme Prints",
        "contactPerson": "R. Iyer",
        "phone": "12345",
        "status": "New",
        "machineName": "KBA Rapida",
        "items": [
            {"slNo": 2, "type": "Sleeve", "qty": 1, "length": "600", "dia": "45", "shore": "65A",
             "remarks": "", "rate": 20.5, "amount": 20.5},
            {"slNo": 1, "type": "Roller", "qty": 2, "length": "500", "dia": "40", "shore": "60A",
             "remarks": "spare", "rate": 10.0, "amount": 20.0},
        ],
        "subtotal": 40.5,
        "gst": 7.29,
        "total": 47.79,
        "remarks": "",
        "deliveryNote": "DN-1",
        "deliveryNoteDate": "2024-03-04",
        "buyerOrderNo": "PO-1",
        "buyerOrderDate": "2024-02-27",
        "createdDate": created,
    }
    payload.update(overrides)
    return payload


def test_healthz(client: TestClient):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_save_and_get_order(client: TestClient):
    r = client.put("/orders", json=_order_payload("ORD-1"))
    assert r.status_code == 200, r.text
    assert r.json() == {"orderNo": "ORD-1"}

    r = client.get("/orders/ORD-1")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["machineName"] == "KBA Rapida"
    assert body["deliveryNoteDate"] == "2024-03-04"
    assert [i["slNo"] for i in body["items"]] == [1, 2]
    assert body["items"][0]["type"] == "Roller"
    assert body["items"][0]["qty"] == 2.0


def test_get_missing_order_returns_404(client: TestClient):
    r = client.get("/orders/NOPE")
    assert r.status_code == 404, r.text
    assert r.json()["code"] == "NOT_FOUND"


def test_list_all_orders_without_pagination(client: TestClient):
    for i in range(3):
        client.put("/orders", json=_order_payload(f"ORD-{i}", created=f"2024-03-0{i + 1}T00:00:00"))

    r = client.get("/orders")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total"] == 3
    assert body["totalPages"] == 1
    assert body["page"] is None
    assert body["pageSize"] is None
    assert [o["orderNo"] for o in body["orders"]] == ["ORD-2", "ORD-1", "ORD-0"]


def test_list_empty_store(client: TestClient):
    body = client.get("/orders").json()
    assert body["orders"] == []
    assert body["total"] == 0
    assert body["totalPages"] == 0


def test_list_paginated(client: TestClient):
    for i in range(7):
        client.put("/orders", json=_order_payload(f"ORD-{i}", created=f"2024-03-01T00:00:0{i}", items=[]))

    r = client.get("/orders", params={"page": 2, "pageSize": 3})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["page"] == 2
    assert body["pageSize"] == 3
    assert body["total"] == 7
    assert body["totalPages"] == 3
    assert [o["orderNo"] for o in body["orders"]] == ["ORD-3", "ORD-2", "ORD-1"]


def test_page_alone_uses_default_page_size(client_factory):
    with client_factory(overrides={"ORDERSTORE_DEFAULT_PAGE_SIZE": "2"}) as client:
        for i in range(5):
            client.put("/orders", json=_order_payload(f"ORD-{i}", created=f"2024-03-01T00:00:0{i}"))

        body = client.get("/orders", params={"page": 3}).json()
        assert body["pageSize"] == 2
        assert body["totalPages"] == 3
        assert [o["orderNo"] for o in body["orders"]] == ["ORD-0"]


def test_invalid_page_parameters_return_422(client: TestClient):
    assert client.get("/orders", params={"page": 0, "pageSize": 10}).status_code == 422
    assert client.get("/orders", params={"page": 1, "pageSize": 0}).status_code == 422


def test_page_size_over_limit_returns_400(client: TestClient):
    r = client.get("/orders", params={"page": 1, "pageSize": 10_000})
    assert r.status_code == 400, r.text
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_resave_replaces_items(client: TestClient):
    client.put("/orders", json=_order_payload("ORD-1"))
    replacement = _order_payload(
        "ORD-1",
        items=[{"slNo": 1, "type": "Blanket", "qty": 5, "rate": 1, "amount": 5}],
    )
    assert client.put("/orders", json=replacement).status_code == 200

    items = client.get("/orders/ORD-1").json()["items"]
    assert len(items) == 1
    assert items[0]["type"] == "Blanket"
    assert items[0]["dia"] == ""


def test_update_status(client: TestClient):
    client.put("/orders", json=_order_payload("ORD-1"))

    r = client.patch("/orders/ORD-1/status", json={"status": "Delivered"})
    assert r.status_code == 200, r.text
    assert r.json() == {"orderNo": "ORD-1", "updated": True}
    assert client.get("/orders/ORD-1").json()["status"] == "Delivered"

    r = client.patch("/orders/NOPE/status", json={"status": "Delivered"})
    assert r.status_code == 200
    assert r.json()["updated"] is False


def test_delete_and_count(client: TestClient):
    client.put("/orders", json=_order_payload("ORD-1"))
    client.put("/orders", json=_order_payload("ORD-2", status="Delivered"))

    assert client.get("/orders/count").json() == {"total": 2}
    assert client.get("/orders/count", params={"status": "Delivered"}).json() == {"total": 1}

    r = client.delete("/orders/ORD-1")
    assert r.status_code == 200
    assert r.json() == {"orderNo": "ORD-1", "deleted": True}
    assert client.get("/orders/count").json() == {"total": 1}

    assert client.delete("/orders/ORD-1").json()["deleted"] is False


def test_invalid_order_body_returns_422(client: TestClient):
    payload = _order_payload("ORD-1")
    del payload["customerName"]
    assert client.put("/orders", json=payload).status_code == 422

    payload = _order_payload("ORD-1", unexpected="x")
    assert client.put("/orders", json=payload).status_code == 422


@pytest.mark.parametrize("field", ["status", "subtotal", "gst", "total"])
def test_order_without_status_or_amounts_is_rejected(client: TestClient, field: str):
    payload = _order_payload("ORD-1")
    del payload[field]

    r = client.put("/orders", json=payload)
    assert r.status_code == 422, r.text
    assert client.get("/orders/count").json() == {"total": 0}


def test_data_survives_restart(tmp_path, client_factory):
    db_path = tmp_path / "persist.db"
    with client_factory(db_path=db_path) as client:
        assert client.put("/orders", json=_order_payload("ORD-1")).status_code == 200

    with client_factory(db_path=db_path) as client:
        body = client.get("/orders/ORD-1").json()
        assert body["orderNo"] == "ORD-1"
        assert len(body["items"]) == 2

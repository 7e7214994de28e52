"""Tests for the JSON REST API under /api/transactions."""

from datetime import datetime

from fastapi.testclient import TestClient

import app.routes_api as routes_api
from app.errors import StoreError, StoreUnavailableError
from main import app

from conftest import add_records, count_records, load_record


def test_list_returns_envelope(client) -> None:
    add_records(
        {"username": "alice", "amount": 1.5, "date": datetime(2024, 1, 20)},
        {"username": "bob", "amount": 3.2, "date": datetime(2024, 1, 15)},
    )

    response = client.get("/api/transactions", params={"limit": 1})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"data", "total", "currentPage", "totalPages"}
    assert body["total"] == 2
    assert body["currentPage"] == 1
    assert body["totalPages"] == 2
    assert len(body["data"]) == 1
    assert body["data"][0]["username"] == "bob"
    assert set(body["data"][0]) == {
        "id", "username", "transactionType", "token", "amount", "date", "status", "description",
    }


def test_list_with_filters_and_sort(client) -> None:
    add_records(
        {"username": "alice.crypto", "token": "ETH", "amount": 1.5},
        {"username": "bob.blockchain", "token": "BTC", "amount": 0.25},
        {"username": "dave.trader", "token": "eth", "amount": 3.2},
    )

    response = client.get(
        "/api/transactions",
        params={"search": "ETH", "sortField": "amount", "sortOrder": "desc"},
    )

    assert response.status_code == 200
    assert [tx["amount"] for tx in response.json()["data"]] == [3.2, 1.5]


def test_list_date_range(client) -> None:
    add_records(
        {"username": "in", "date": datetime(2024, 1, 10, 23, 0, 0)},
        {"username": "out", "date": datetime(2024, 1, 11, 0, 0, 1)},
    )

    response = client.get("/api/transactions", params={"startDate": "2024-01-10", "endDate": "2024-01-10"})

    assert [tx["username"] for tx in response.json()["data"]] == ["in"]


def test_list_rejects_invalid_params(client) -> None:
    response = client.get("/api/transactions", params={"page": "0", "sortField": "price", "search": "eth"})

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert {e["field"] for e in errors} == {"page", "sortField"}
    assert all(e["location"] == "query" for e in errors)


def test_list_rejects_out_of_range_page_and_limit(client) -> None:
    add_records({"username": "alice"})

    huge_page = client.get("/api/transactions", params={"page": str(10**19), "limit": "10"})
    huge_limit = client.get("/api/transactions", params={"limit": str(10**20)})

    assert huge_page.status_code == 400
    assert [e["field"] for e in huge_page.json()["errors"]] == ["page"]
    assert huge_limit.status_code == 400
    assert [e["field"] for e in huge_limit.json()["errors"]] == ["limit"]


def test_list_empty_store(client) -> None:
    response = client.get("/api/transactions")

    assert response.json() == {"data": [], "total": 0, "currentPage": 1, "totalPages": 1}


def test_get_one(client) -> None:
    [record_id] = add_records({"username": "alice", "description": "memo"})

    response = client.get(f"/api/transactions/{record_id}")

    assert response.status_code == 200
    assert response.json()["id"] == record_id
    assert response.json()["description"] == "memo"


def test_get_unknown(client) -> None:
    response = client.get("/api/transactions/nope")

    assert response.status_code == 404
    assert response.json() == {"msg": "Transaction not found"}


def test_create(client) -> None:
    response = client.post(
        "/api/transactions",
        json={"username": "alice", "transactionType": "Borrow", "token": "USDC", "amount": "500"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["amount"] == 500.0
    assert body["status"] == "waiting"
    assert load_record(body["id"]).token == "USDC"


def test_create_with_unknown_type_persists_nothing(client) -> None:
    response = client.post(
        "/api/transactions",
        json={"username": "alice", "transactionType": "Swap", "token": "ETH", "amount": 1},
    )

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert errors[0]["field"] == "transactionType"
    assert errors[0]["location"] == "body"
    assert errors[0]["value"] == "Swap"
    assert count_records() == 0


def test_create_rejects_boolean_amount(client) -> None:
    response = client.post(
        "/api/transactions",
        json={"username": "alice", "transactionType": "Stake", "token": "ETH", "amount": True},
    )

    assert response.status_code == 400
    assert [e["field"] for e in response.json()["errors"]] == ["amount"]
    assert count_records() == 0


def test_create_reports_every_missing_field(client) -> None:
    response = client.post("/api/transactions", json={"token": "ETH"})

    assert response.status_code == 400
    assert {e["field"] for e in response.json()["errors"]} == {"username", "transactionType", "amount"}


def test_update_partial(client) -> None:
    [record_id] = add_records({"username": "bob", "token": "DAI", "transaction_type": "Lend", "amount": 250.0})

    response = client.put(f"/api/transactions/{record_id}", json={"amount": 300})

    assert response.status_code == 200
    body = response.json()
    assert body["amount"] == 300.0
    assert (body["username"], body["token"], body["transactionType"]) == ("bob", "DAI", "Lend")


def test_update_rejects_invalid_field(client) -> None:
    [record_id] = add_records({"username": "bob"})

    response = client.put(f"/api/transactions/{record_id}", json={"username": ""})

    assert response.status_code == 400
    assert load_record(record_id).username == "bob"


def test_update_unknown(client) -> None:
    response = client.put("/api/transactions/nope", json={"amount": 1})

    assert response.status_code == 404


def test_delete(client) -> None:
    [record_id] = add_records({})

    response = client.delete(f"/api/transactions/{record_id}")

    assert response.status_code == 200
    assert response.json() == {"msg": "Transaction deleted"}
    assert count_records() == 0


def test_delete_unknown_leaves_collection(client) -> None:
    add_records({})

    response = client.delete("/api/transactions/nope")

    assert response.status_code == 404
    assert count_records() == 1


def test_store_error_is_generic_500(client, monkeypatch) -> None:
    def failing(db, params):
        raise StoreError("disk I/O error")

    monkeypatch.setattr(routes_api, "list_transactions", failing)

    response = client.get("/api/transactions")

    assert response.status_code == 500
    assert response.json() == {"msg": "Server Error"}
    assert "disk" not in response.text


def test_unreachable_store_is_503(client, monkeypatch) -> None:
    def failing(db, params):
        raise StoreUnavailableError("connection refused")

    monkeypatch.setattr(routes_api, "list_transactions", failing)

    response = client.get("/api/transactions")

    assert response.status_code == 503


def test_unexpected_exception_does_not_leak(monkeypatch) -> None:
    def failing(db, record_id):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(routes_api, "get_transaction", failing)

    with TestClient(app, raise_server_exceptions=False) as c:
        response = c.get("/api/transactions/anything")

    assert response.status_code == 500
    assert response.json() == {"msg": "Server Error"}
    assert "secret" not in response.text


def test_cors_headers(client) -> None:
    response = client.get("/api/transactions", headers={"Origin": "http://localhost:3000"})

    assert response.headers.get("access-control-allow-origin") in ("*", "http://localhost:3000")

from __future__ import annotations

import uuid

import pytest


def _create(client, who: dict, **fields) -> dict:
    payload = {"amount": 42.5, "direction": "outflow", "transaction_date": "2025-01-15", "description": "Lunch"}
    payload.update(fields)
    r = client.post("/transactions", json=payload, headers=who["headers"])
    assert r.status_code == 201, r.text
    return r.json()


def _list(client, who: dict, **params) -> list[dict]:
    r = client.get("/transactions", params=params, headers=who["headers"])
    assert r.status_code == 200, r.text
    return r.json()


def test_create_echoes_fields_and_assigns_id(client, alice) -> None:
    row = _create(client, alice, user_id=alice["user"]["id"], amount=-12.34)
    assert uuid.UUID(row["id"])
    assert row["user_id"] == alice["user"]["id"]
    assert row["amount"] == -12.34
    assert row["direction"] == "outflow"
    assert row["transaction_date"] == "2025-01-15"


@pytest.mark.parametrize(
    "payload",
    [
        {"direction": "outflow", "transaction_date": "2025-01-15"},
        {"amount": "12", "direction": "outflow", "transaction_date": "2025-01-15"},
        {"amount": True, "direction": "outflow", "transaction_date": "2025-01-15"},
        {"amount": 1.234, "direction": "outflow", "transaction_date": "2025-01-15"},
        {"amount": 5, "direction": "sideways", "transaction_date": "2025-01-15"},
        {"amount": 5, "direction": "outflow", "transaction_date": "2025-02-30"},
        {"amount": 5, "direction": "outflow", "transaction_date": "01/15/2025"},
        {"amount": 5, "direction": "outflow", "transaction_date": "2025-01-15", "foo": 1},
        {"amount": 5, "direction": "outflow", "transaction_date": "2025-01-15", "category_id": "not-a-uuid"},
    ],
)
def test_malformed_payloads_are_rejected_and_not_persisted(client, alice, payload) -> None:
    r = client.post("/transactions", json=payload, headers=alice["headers"])
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid body"
    assert isinstance(r.json()["detail"], list)
    assert _list(client, alice) == []


def test_body_user_id_must_match_caller(client, alice, bob) -> None:
    r = client.post(
        "/transactions",
        json={"user_id": bob["user"]["id"], "amount": 5, "direction": "inflow", "transaction_date": "2025-01-01"},
        headers=alice["headers"],
    )
    assert r.status_code == 400
    assert r.json()["detail"] == [{"field": "user_id", "message": "must match the authenticated user"}]
    assert _list(client, bob) == []


def test_unknown_foreign_key_is_a_validation_error(client, alice) -> None:
    r = client.post(
        "/transactions",
        json={"amount": 5, "direction": "inflow", "transaction_date": "2025-01-01", "account_id": str(uuid.uuid4())},
        headers=alice["headers"],
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid reference"


def test_partial_update_with_put_and_patch(client, alice) -> None:
    row = _create(client, alice)
    r = client.patch(f"/transactions/{row['id']}", json={"amount": 50}, headers=alice["headers"])
    assert r.status_code == 200, r.text
    assert r.json()["amount"] == 50.0
    assert r.json()["description"] == "Lunch"

    r = client.put(f"/transactions/{row['id']}", json={"description": None}, headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["description"] is None
    assert r.json()["amount"] == 50.0


def test_update_rejections(client, alice, bob) -> None:
    row = _create(client, alice)
    url = f"/transactions/{row['id']}"

    r = client.patch(url, json={}, headers=alice["headers"])
    assert r.status_code == 400
    assert r.json()["error"] == "No fields to update"

    assert client.patch(url, json={"amount": None}, headers=alice["headers"]).status_code == 400
    assert client.patch(url, json={"user_id": bob["user"]["id"]}, headers=alice["headers"]).status_code == 400
    assert client.patch(url, json={"amount": 1}, headers=bob["headers"]).status_code == 404

    r = client.patch("/transactions/123", json={"amount": 1}, headers=alice["headers"])
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid id"

    assert client.patch(f"/transactions/{uuid.uuid4()}", json={"amount": 1}, headers=alice["headers"]).status_code == 404
    assert _list(client, alice)[0]["amount"] == 42.5


def test_delete_is_idempotent_and_scoped(client, alice, bob) -> None:
    row = _create(client, alice)
    url = f"/transactions/{row['id']}"

    r = client.delete(url, headers=bob["headers"])
    assert r.status_code == 200
    assert r.json() == {"deleted": 0}

    assert client.delete(url, headers=alice["headers"]).json() == {"deleted": 1}
    assert client.delete(url, headers=alice["headers"]).json() == {"deleted": 0}
    assert client.delete(f"/transactions/{uuid.uuid4()}", headers=alice["headers"]).json() == {"deleted": 0}
    assert client.delete("/transactions/nope", headers=alice["headers"]).status_code == 400


def test_list_filters_ordering_and_pagination(client, alice, bob, expense_category) -> None:
    acct = client.post(
        "/accounts",
        json={"institution": "Chase", "name": "Checking", "type": "checking"},
        headers=alice["headers"],
    ).json()
    jan = _create(client, alice, transaction_date="2025-01-10")
    feb = _create(client, alice, transaction_date="2025-02-10", account_id=acct["id"])
    mar = _create(client, alice, transaction_date="2025-03-10", category_id=expense_category["id"])
    _create(client, bob, transaction_date="2025-02-11")

    assert [t["id"] for t in _list(client, alice)] == [mar["id"], feb["id"], jan["id"]]
    assert [t["id"] for t in _list(client, alice, **{"from": "2025-02-01", "to": "2025-03-10"})] == [mar["id"], feb["id"]]
    assert [t["id"] for t in _list(client, alice, to="2025-01-10")] == [jan["id"]]
    assert [t["id"] for t in _list(client, alice, accountId=acct["id"])] == [feb["id"]]
    assert [t["id"] for t in _list(client, alice, category=expense_category["id"])] == [mar["id"]]

    assert [t["id"] for t in _list(client, alice, limit=1, offset=1)] == [feb["id"]]
    assert len(_list(client, alice, limit=0)) == 1
    assert len(_list(client, alice, limit=100000)) == 3

    h = alice["headers"]
    assert client.get("/transactions", params={"offset": -1}, headers=h).status_code == 400
    assert client.get("/transactions", params={"limit": "abc"}, headers=h).status_code == 400
    assert client.get("/transactions", params={"accountId": "abc"}, headers=h).status_code == 400
    assert client.get("/transactions", params={"from": "2025-13-01"}, headers=h).status_code == 400
    assert client.get("/transactions", params={"from": "2025-03-01", "to": "2025-01-01"}, headers=h).status_code == 400


def test_summary_by_month_week_and_year(client, alice) -> None:
    _create(client, alice, amount=1000, direction="inflow", transaction_date="2025-01-15")
    _create(client, alice, amount=-200, direction="outflow", transaction_date="2025-01-19")
    _create(client, alice, amount=50, direction="outflow", transaction_date="2025-02-03")

    r = client.get("/transactions/summary", params={"range": "month"}, headers=alice["headers"])
    assert r.status_code == 200
    assert r.json() == [
        {"period": "2025-02", "income": 0.0, "expense": 50.0},
        {"period": "2025-01", "income": 1000.0, "expense": 200.0},
    ]

    weeks = client.get("/transactions/summary", params={"range": "week"}, headers=alice["headers"]).json()
    assert [w["period"] for w in weeks] == ["2025-02-03", "2025-01-13"]
    assert weeks[1] == {"period": "2025-01-13", "income": 1000.0, "expense": 200.0}

    years = client.get("/transactions/summary", params={"range": "year"}, headers=alice["headers"]).json()
    assert years == [{"period": "2025", "income": 1000.0, "expense": 250.0}]

    r = client.get("/transactions/summary", params={"range": "decade"}, headers=alice["headers"])
    assert r.status_code == 400


def test_references_to_another_users_rows_are_rejected(client, alice, bob, expense_category) -> None:
    bob_account = client.post(
        "/accounts", json={"institution": "Chase", "name": "Bob chk", "type": "checking"}, headers=bob["headers"]
    ).json()
    bob_category = client.post("/categories", json={"name": "BobPrivate", "type": "expense"}, headers=bob["headers"]).json()
    base = {"amount": 10, "direction": "outflow", "transaction_date": "2025-01-15"}

    for fields, field in [
        ({"account_id": bob_account["id"]}, "account_id"),
        ({"category_id": bob_category["id"]}, "category_id"),
    ]:
        r = client.post("/transactions", json={**base, **fields}, headers=alice["headers"])
        assert r.status_code == 400
        assert r.json()["error"] == "Invalid reference"
        assert r.json()["detail"][0]["field"] == field
    assert _list(client, alice) == []

    txn = _create(client, alice, category_id=expense_category["id"])
    r = client.put(f"/transactions/{txn['id']}", json={"account_id": bob_account["id"]}, headers=alice["headers"])
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid reference"
    r = client.patch(f"/transactions/{txn['id']}", json={"category_id": None}, headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["category_id"] is None

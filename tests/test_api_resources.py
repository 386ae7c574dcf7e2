from __future__ import annotations

import uuid


def test_accounts_crud(client, alice, bob) -> None:
    h = alice["headers"]
    r = client.post("/accounts", json={"institution": "Chase", "name": "Savings", "type": "savings", "last4": "1234"}, headers=h)
    assert r.status_code == 201, r.text
    savings = r.json()
    assert savings["balance"] == 0.0
    assert savings["currency"] == "USD"
    client.post("/accounts", json={"institution": "Amex", "name": "Card", "type": "credit", "balance": -10.5}, headers=h)

    assert [a["name"] for a in client.get("/accounts", headers=h).json()] == ["Card", "Savings"]
    assert client.get("/accounts", headers=bob["headers"]).json() == []

    r = client.patch(f"/accounts/{savings['id']}", json={"balance": 2500.75, "last4": None}, headers=h)
    assert r.status_code == 200
    assert r.json()["balance"] == 2500.75
    assert r.json()["last4"] is None

    assert client.delete(f"/accounts/{savings['id']}", headers=bob["headers"]).json() == {"deleted": 0}
    assert client.delete(f"/accounts/{savings['id']}", headers=h).json() == {"deleted": 1}


def test_account_validation(client, alice) -> None:
    h = alice["headers"]
    base = {"institution": "Chase", "name": "Checking", "type": "checking"}
    assert client.post("/accounts", json={**base, "last4": "12a4"}, headers=h).status_code == 400
    assert client.post("/accounts", json={**base, "currency": "usd"}, headers=h).status_code == 400
    assert client.post("/accounts", json={"name": "x", "type": "checking"}, headers=h).status_code == 400
    assert client.get("/accounts", headers=h).json() == []


def test_deleting_account_detaches_transactions(client, alice) -> None:
    h = alice["headers"]
    acct = client.post("/accounts", json={"institution": "Chase", "name": "Checking", "type": "checking"}, headers=h).json()
    client.post(
        "/transactions",
        json={"amount": 5, "direction": "outflow", "transaction_date": "2025-01-01", "account_id": acct["id"]},
        headers=h,
    )
    assert client.delete(f"/accounts/{acct['id']}", headers=h).json() == {"deleted": 1}
    txns = client.get("/transactions", headers=h).json()
    assert len(txns) == 1
    assert txns[0]["account_id"] is None


def test_goals_crud_and_validation(client, alice) -> None:
    h = alice["headers"]
    r = client.post("/goals", json={"name": "Emergency fund", "target_amount": 10000, "target_date": "2025-12-31"}, headers=h)
    assert r.status_code == 201, r.text
    goal = r.json()
    assert goal["current_amount"] == 0.0
    assert goal["target_date"] == "2025-12-31"

    assert client.post("/goals", json={"name": "", "target_amount": 10}, headers=h).status_code == 400
    assert client.post("/goals", json={"name": "x", "target_amount": 0}, headers=h).status_code == 400
    assert client.post("/goals", json={"name": "x", "target_amount": 10, "current_amount": -1}, headers=h).status_code == 400
    assert client.post("/goals", json={"name": "x", "target_amount": 10, "target_date": "2025-12"}, headers=h).status_code == 400

    r = client.put(f"/goals/{goal['id']}", json={"current_amount": 1500, "target_date": None}, headers=h)
    assert r.status_code == 200
    assert r.json()["current_amount"] == 1500.0
    assert r.json()["target_date"] is None

    second = client.post("/goals", json={"name": "Vacation", "target_amount": 3000}, headers=h).json()
    assert [g["id"] for g in client.get("/goals", headers=h).json()] == [second["id"], goal["id"]]
    assert client.delete(f"/goals/{goal['id']}", headers=h).json() == {"deleted": 1}


def test_categories_include_globals_and_own(client, alice, bob) -> None:
    h = alice["headers"]
    mine = client.post("/categories", json={"name": "Books", "type": "expense", "icon": "book"}, headers=h).json()
    assert mine["user_id"] == alice["user"]["id"]
    assert mine["is_default"] is False

    names = [c["name"] for c in client.get("/categories", headers=h).json()]
    assert names == sorted(names)
    assert "Books" in names and "Groceries" in names
    assert "Books" not in [c["name"] for c in client.get("/categories", headers=bob["headers"]).json()]

    own_only = client.get("/categories", params={"include_defaults": "false"}, headers=h).json()
    assert [c["name"] for c in own_only] == ["Books"]

    income = client.get("/categories", params={"type": "income"}, headers=h).json()
    assert {c["type"] for c in income} == {"income"}

    assert client.get("/categories", params={"type": "other"}, headers=h).status_code == 400
    assert client.get("/categories", params={"user_id": alice["user"]["id"]}, headers=h).status_code == 200
    assert client.get("/categories", params={"user_id": bob["user"]["id"]}, headers=h).status_code == 400

    r = client.post("/categories", json={"name": "Books", "type": "expense"}, headers=h)
    assert r.status_code == 409


def test_global_categories_are_read_only(client, alice) -> None:
    h = alice["headers"]
    groceries = next(c for c in client.get("/categories", headers=h).json() if c["name"] == "Groceries")
    assert groceries["user_id"] is None
    assert client.patch(f"/categories/{groceries['id']}", json={"name": "Food"}, headers=h).status_code == 404
    assert client.delete(f"/categories/{groceries['id']}", headers=h).json() == {"deleted": 0}

    mine = client.post("/categories", json={"name": "Gifts", "type": "expense"}, headers=h).json()
    r = client.patch(f"/categories/{mine['id']}", json={"name": "Presents"}, headers=h)
    assert r.status_code == 200
    assert r.json()["name"] == "Presents"
    assert client.delete(f"/categories/{mine['id']}", headers=h).json() == {"deleted": 1}
    assert client.delete(f"/categories/{uuid.uuid4()}", headers=h).json() == {"deleted": 0}

from __future__ import annotations

import uuid


def _budget(client, who: dict, category_id: str, month: str = "2025-06", limit: float = 300) -> object:
    return client.post(
        "/budgets",
        json={"category_id": category_id, "month": month, "limit_amount": limit},
        headers=who["headers"],
    )


def _categories(client, who: dict) -> dict[str, dict]:
    return {c["name"]: c for c in client.get("/categories", headers=who["headers"]).json()}


def test_month_is_normalized_to_first_day(client, alice, expense_category) -> None:
    r = _budget(client, alice, expense_category["id"], month="2025-03")
    assert r.status_code == 201, r.text
    assert r.json()["month"] == "2025-03-01"

    dining = _categories(client, alice)["Dining"]
    r = _budget(client, alice, dining["id"], month="2025-03-17")
    assert r.status_code == 201
    assert r.json()["month"] == "2025-03-01"


def test_duplicate_budget_conflicts(client, alice, bob, expense_category) -> None:
    assert _budget(client, alice, expense_category["id"], month="2025-03").status_code == 201
    r = _budget(client, alice, expense_category["id"], month="2025-03-17")
    assert r.status_code == 409
    assert r.json()["error"] == "Budget already exists for this category and month"
    # Uniqueness is per user.
    assert _budget(client, bob, expense_category["id"], month="2025-03").status_code == 201


def test_spent_and_overrun(client, alice, expense_category) -> None:
    cid = expense_category["id"]
    for amount, day in [(200, "2025-06-03"), (-150, "2025-06-28"), (999, "2025-07-01")]:
        client.post(
            "/transactions",
            json={"amount": amount, "direction": "outflow", "transaction_date": day, "category_id": cid},
            headers=alice["headers"],
        )
    client.post(
        "/transactions",
        json={"amount": 500, "direction": "inflow", "transaction_date": "2025-06-10", "category_id": cid},
        headers=alice["headers"],
    )

    created = _budget(client, alice, cid, month="2025-06", limit=300).json()
    assert created["spent"] == 350.0
    assert created["overrun"] is True

    listed = client.get("/budgets", headers=alice["headers"]).json()
    assert len(listed) == 1
    assert listed[0]["spent"] == 350.0
    assert listed[0]["overrun"] is True

    r = client.patch(f"/budgets/{created['id']}", json={"limit_amount": 400}, headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["spent"] == 350.0
    assert r.json()["overrun"] is False


def test_budget_validation(client, alice, expense_category) -> None:
    cid = expense_category["id"]
    assert _budget(client, alice, cid, limit=0).status_code == 400
    assert _budget(client, alice, cid, month="2025-13").status_code == 400
    assert _budget(client, alice, cid, month="June").status_code == 400
    r = client.post(
        "/budgets",
        json={"category_id": cid, "month": "2025-06", "limit_amount": 10, "period": "weekly"},
        headers=alice["headers"],
    )
    assert r.status_code == 400
    r = client.post(
        "/budgets",
        json={"category_id": cid, "month": "2025-06", "limit_amount": 10, "period": "monthly"},
        headers=alice["headers"],
    )
    assert r.status_code == 201

    r = _budget(client, alice, str(uuid.uuid4()))
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid reference"


def test_update_into_existing_month_conflicts(client, alice, expense_category) -> None:
    cid = expense_category["id"]
    _budget(client, alice, cid, month="2025-05")
    june = _budget(client, alice, cid, month="2025-06").json()
    r = client.put(f"/budgets/{june['id']}", json={"month": "2025-05-20"}, headers=alice["headers"])
    assert r.status_code == 409
    r = client.put(f"/budgets/{june['id']}", json={"month": "2025-04-20", "period": "monthly"}, headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["month"] == "2025-04-01"
    assert client.put(f"/budgets/{june['id']}", json={"period": "monthly"}, headers=alice["headers"]).status_code == 400


def test_list_filters_and_ordering(client, alice, expense_category) -> None:
    cid = expense_category["id"]
    dining = _categories(client, alice)["Dining"]["id"]
    _budget(client, alice, cid, month="2025-05")
    _budget(client, alice, cid, month="2025-06")
    _budget(client, alice, dining, month="2025-06")

    months = [b["month"] for b in client.get("/budgets", headers=alice["headers"]).json()]
    assert months == ["2025-06-01", "2025-06-01", "2025-05-01"]

    june = client.get("/budgets", params={"month": "2025-06-30"}, headers=alice["headers"]).json()
    assert {b["category_id"] for b in june} == {cid, dining}

    only_dining = client.get("/budgets", params={"category_id": dining}, headers=alice["headers"]).json()
    assert [b["category_id"] for b in only_dining] == [dining]

    assert client.get("/budgets", params={"month": "06/2025"}, headers=alice["headers"]).status_code == 400


def test_delete_budget(client, alice, expense_category) -> None:
    b = _budget(client, alice, expense_category["id"]).json()
    assert client.delete(f"/budgets/{b['id']}", headers=alice["headers"]).json() == {"deleted": 1}
    assert client.delete(f"/budgets/{b['id']}", headers=alice["headers"]).json() == {"deleted": 0}


def test_budget_on_another_users_category_is_rejected(client, alice, bob, expense_category) -> None:
    private = client.post("/categories", json={"name": "BobPrivate", "type": "expense"}, headers=bob["headers"]).json()

    r = _budget(client, alice, private["id"])
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid reference"
    assert r.json()["detail"][0]["field"] == "category_id"
    assert client.get("/budgets", headers=alice["headers"]).json() == []

    mine = _budget(client, alice, expense_category["id"]).json()
    r = client.patch(f"/budgets/{mine['id']}", json={"category_id": private["id"]}, headers=alice["headers"])
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid reference"

    assert client.delete(f"/categories/{private['id']}", headers=bob["headers"]).json() == {"deleted": 1}
    assert [b["id"] for b in client.get("/budgets", headers=alice["headers"]).json()] == [mine["id"]]

from __future__ import annotations

from src.db.models import User


def test_health_is_public(client) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_register_and_login(client, session) -> None:
    r = client.post(
        "/auth/register",
        json={"email": "  Carol@Example.com ", "password": "long-enough", "name": "Carol"},
    )
    assert r.status_code == 201, r.text
    user = r.json()["user"]
    assert user["email"] == "carol@example.com"
    assert "password" not in user and "password_hash" not in user

    stored = session.query(User).filter(User.email == "carol@example.com").one()
    assert stored.password_hash != "long-enough"

    r = client.post("/auth/login", json={"email": "carol@example.com", "password": "long-enough"})
    assert r.status_code == 200
    body = r.json()
    assert body["token"]
    assert body["user"]["id"] == user["id"]


def test_register_duplicate_email_conflicts(client) -> None:
    payload = {"email": "dup@example.com", "password": "long-enough", "name": "Dup"}
    assert client.post("/auth/register", json=payload).status_code == 201
    r = client.post("/auth/register", json={**payload, "email": "DUP@example.com"})
    assert r.status_code == 409
    assert r.json() == {"error": "Email already in use"}


def test_register_validation(client) -> None:
    r = client.post("/auth/register", json={"email": "not-an-email", "password": "short", "name": ""})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Invalid body"
    fields = {d["field"] for d in body["detail"]}
    assert {"email", "password", "name"} <= fields


def test_login_failures_are_401(client, alice) -> None:
    r = client.post("/auth/login", json={"email": "alice@example.com", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json()["error"] == "Invalid credentials"
    r = client.post("/auth/login", json={"email": "nobody@example.com", "password": "whatever1"})
    assert r.status_code == 401


def test_protected_routes_require_bearer_token(client, alice) -> None:
    for path in ["/profile", "/accounts", "/transactions", "/budgets", "/goals", "/categories", "/reports/alerts"]:
        assert client.get(path).status_code == 401, path
    assert client.get("/accounts", headers={"Authorization": "Bearer garbage"}).status_code == 401
    assert client.get("/accounts", headers={"Authorization": f"Basic {alice['token']}"}).status_code == 401
    assert client.get("/accounts", headers=alice["headers"]).status_code == 200


def test_profile_read_and_update(client, alice) -> None:
    r = client.get("/profile", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["email"] == "alice@example.com"
    assert r.json()["notification_preferences"] == {}

    r = client.put(
        "/profile",
        json={"name": "Alice B", "notificationPreferences": {"budget_alerts": False}},
        headers=alice["headers"],
    )
    assert r.status_code == 200, r.text
    assert r.json()["name"] == "Alice B"
    assert r.json()["notification_preferences"] == {"budget_alerts": False}

    assert client.patch("/profile", json={}, headers=alice["headers"]).status_code == 400
    assert client.patch("/profile", json={"email": "x@example.com"}, headers=alice["headers"]).status_code == 400


def test_unknown_route_uses_error_envelope(client) -> None:
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}

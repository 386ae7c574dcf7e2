from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.app.db import db_session
from src.app.main import create_app
from src.db.init_db import init_db
from src.db.session import make_engine
from src.finance.config import Settings


TEST_SECRET = "test-secret-not-for-production"


@pytest.fixture()
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SECRET, bcrypt_rounds=4, environment="test")


@pytest.fixture()
def engine() -> Engine:
    # One shared in-memory connection so every session sees the same database.
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine: Engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)
    with SessionLocal() as s:
        yield s


@pytest.fixture()
def app(engine: Engine, settings: Settings):
    app = create_app(settings, init_database=False)
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)

    def _db_session():
        s = SessionLocal()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[db_session] = _db_session
    return app


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def make_user(client: TestClient) -> Callable[..., dict]:
    """Register + log in; returns {"headers": ..., "user": ..., "token": ...}."""

    def _make(email: str = "alice@example.com", password: str = "correct-horse-9", name: str = "Alice") -> dict:
        r = client.post("/auth/register", json={"email": email, "password": password, "name": name})
        assert r.status_code == 201, r.text
        r = client.post("/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        body = r.json()
        return {
            "headers": {"Authorization": f"Bearer {body['token']}"},
            "user": body["user"],
            "token": body["token"],
        }

    return _make


@pytest.fixture()
def alice(make_user) -> dict:
    return make_user()


@pytest.fixture()
def bob(make_user) -> dict:
    return make_user(email="bob@example.com", name="Bob")


@pytest.fixture()
def expense_category(client: TestClient, alice: dict) -> dict:
    r = client.get("/categories", params={"type": "expense"}, headers=alice["headers"])
    assert r.status_code == 200
    return next(c for c in r.json() if c["name"] == "Groceries")

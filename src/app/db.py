from __future__ import annotations

from collections.abc import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from src.db.session import get_session
from src.finance.config import Settings, load_settings


def db_session() -> Generator[Session, None, None]:
    """One session per request; anything left uncommitted is rolled back on close."""
    session = get_session()
    try:
        yield session
    finally:
        session.close()


def app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else load_settings()

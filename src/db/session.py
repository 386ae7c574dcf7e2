from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from src.finance.config import load_settings


def get_database_url() -> str:
    return load_settings().database_url


_ENGINE: Engine | None = None


def _enable_sqlite_foreign_keys(dbapi_conn, _record) -> None:
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def make_engine(url: str, **kwargs) -> Engine:
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(url, future=True, connect_args=connect_args, **kwargs)
    if is_sqlite:
        # SQLite ignores ON DELETE actions and FK checks unless enabled per connection.
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def get_engine() -> Engine:
    global _ENGINE
    if _ENGINE is not None:
        return _ENGINE
    _ENGINE = make_engine(get_database_url())
    return _ENGINE


SessionLocal = sessionmaker(bind=get_engine(), class_=Session, autoflush=False, autocommit=False)


def get_session() -> Session:
    return SessionLocal()

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from src.db.models import Base, Category
from src.db.session import get_engine

log = logging.getLogger(__name__)


DEFAULT_CATEGORIES: list[tuple[str, str, str]] = [
    ("Groceries", "expense", "cart"),
    ("Dining", "expense", "utensils"),
    ("Rent", "expense", "home"),
    ("Utilities", "expense", "bolt"),
    ("Transport", "expense", "car"),
    ("Entertainment", "expense", "film"),
    ("Health", "expense", "heart"),
    ("Shopping", "expense", "bag"),
    ("Travel", "expense", "plane"),
    ("Salary", "income", "briefcase"),
    ("Freelance", "income", "laptop"),
    ("Interest", "income", "percent"),
]


def _ensure_sqlite_dir(engine: Engine) -> None:
    if engine.dialect.name != "sqlite":
        return
    db = engine.url.database
    if db and db != ":memory:":
        Path(db).parent.mkdir(parents=True, exist_ok=True)


def seed_default_categories(session: Session) -> int:
    existing = {
        (name.lower(), type_)
        for name, type_ in session.query(Category.name, Category.type).filter(Category.user_id.is_(None)).all()
    }
    created = 0
    for name, type_, icon in DEFAULT_CATEGORIES:
        if (name.lower(), type_) in existing:
            continue
        session.add(Category(user_id=None, name=name, type=type_, icon=icon, is_default=True))
        created += 1
    session.flush()
    return created


def init_db(engine: Engine | None = None) -> None:
    engine = engine or get_engine()
    _ensure_sqlite_dir(engine)
    Base.metadata.create_all(bind=engine)
    with Session(engine) as session:
        created = seed_default_categories(session)
        session.commit()
    if created:
        log.info("Seeded %d default categories", created)

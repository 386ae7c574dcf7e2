from __future__ import annotations

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from src.db.models import Category
from src.finance.filters import delete_owned, insert_row, update_owned
from src.finance.schemas import CategoryCreate, CategoryUpdate


def list_categories(
    session: Session,
    *,
    user_id: str,
    type_: Optional[str] = None,
    include_defaults: bool = True,
) -> list[Category]:
    """
    The caller's own categories, plus global defaults (user_id NULL) unless
    include_defaults is off. Ordered by name.
    """
    stmt = select(Category)
    if type_:
        stmt = stmt.where(Category.type == type_)
    if include_defaults:
        stmt = stmt.where(or_(Category.user_id == user_id, Category.user_id.is_(None)))
    else:
        stmt = stmt.where(Category.user_id == user_id)
    stmt = stmt.order_by(Category.name.asc(), Category.id.asc())
    return list(session.scalars(stmt))


def create_category(session: Session, *, user_id: str, payload: CategoryCreate) -> Category:
    row = Category(user_id=user_id, is_default=False, **payload.model_dump())
    return insert_row(session, row, conflict_message="Category already exists")


def update_category(session: Session, *, user_id: str, category_id: str, patch: CategoryUpdate) -> Category:
    # Global defaults have user_id NULL, so they never match and stay read-only.
    return update_owned(session, Category, row_id=category_id, user_id=user_id, patch=patch)


def delete_category(session: Session, *, user_id: str, category_id: str) -> int:
    return delete_owned(session, Category, row_id=category_id, user_id=user_id)

from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, aliased

from src.db.models import Budget, Transaction
from src.db.periods import period_key
from src.finance.filters import Page, check_owner, check_references, delete_owned, insert_row, update_owned
from src.finance.schemas import BudgetCreate, BudgetOut, BudgetUpdate
from src.utils.money import money
from src.utils.time import month_end

DUPLICATE_MESSAGE = "Budget already exists for this category and month"


def _spent_subquery(session: Session):
    """
    Correlated SUM(ABS(amount)) of the owner's outflows in the budget's category
    and calendar month.
    """
    t = aliased(Transaction)
    return (
        select(func.coalesce(func.sum(func.abs(t.amount)), 0))
        .where(
            t.user_id == Budget.user_id,
            t.category_id == Budget.category_id,
            t.direction == "outflow",
            period_key(session, t.transaction_date) == period_key(session, Budget.month),
        )
        .correlate(Budget)
        .scalar_subquery()
    )


def spent_for(session: Session, *, user_id: str, category_id: str, month: dt.date) -> float:
    stmt = select(func.coalesce(func.sum(func.abs(Transaction.amount)), 0)).where(
        Transaction.user_id == user_id,
        Transaction.category_id == category_id,
        Transaction.direction == "outflow",
        Transaction.transaction_date >= month,
        Transaction.transaction_date <= month_end(month),
    )
    return money(session.scalar(stmt))


def enrich(budget: Budget, spent: float) -> BudgetOut:
    base = {k: getattr(budget, k) for k in ("id", "user_id", "category_id", "month", "limit_amount", "created_at", "updated_at")}
    spent = money(spent)
    return BudgetOut(**base, spent=spent, overrun=spent > float(budget.limit_amount))


def list_budgets(
    session: Session,
    *,
    user_id: str,
    page: Page,
    month: Optional[dt.date] = None,
    category_id: Optional[str] = None,
) -> list[BudgetOut]:
    spent = _spent_subquery(session).label("spent")
    stmt = select(Budget, spent).where(Budget.user_id == user_id)
    if month is not None:
        stmt = stmt.where(Budget.month == month)
    if category_id:
        stmt = stmt.where(Budget.category_id == category_id)
    stmt = (
        stmt.order_by(Budget.month.desc(), Budget.created_at.desc(), Budget.id.asc())
        .limit(page.limit)
        .offset(page.offset)
    )
    return [enrich(b, s) for b, s in session.execute(stmt).all()]


def create_budget(session: Session, *, user_id: str, payload: BudgetCreate) -> BudgetOut:
    check_owner(payload.user_id, user_id)
    check_references(session, user_id=user_id, category_id=payload.category_id)
    row = Budget(
        user_id=user_id,
        category_id=payload.category_id,
        month=payload.month,
        limit_amount=payload.limit_amount,
    )
    insert_row(session, row, conflict_message=DUPLICATE_MESSAGE)
    return enrich(row, spent_for(session, user_id=user_id, category_id=row.category_id, month=row.month))


def update_budget(session: Session, *, user_id: str, budget_id: str, patch: BudgetUpdate) -> BudgetOut:
    check_references(session, user_id=user_id, category_id=patch.changes().get("category_id"))
    row = update_owned(
        session,
        Budget,
        row_id=budget_id,
        user_id=user_id,
        patch=patch,
        conflict_message=DUPLICATE_MESSAGE,
    )
    return enrich(row, spent_for(session, user_id=user_id, category_id=row.category_id, month=row.month))


def delete_budget(session: Session, *, user_id: str, budget_id: str) -> int:
    return delete_owned(session, Budget, row_id=budget_id, user_id=user_id)

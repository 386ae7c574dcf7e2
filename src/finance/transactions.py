from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from src.db.models import Transaction
from src.db.periods import period_key
from src.finance.errors import BadRequest
from src.finance.filters import Page, check_owner, check_references, delete_owned, insert_row, update_owned
from src.finance.periods import SUMMARY_RANGES, DateWindow
from src.finance.schemas import SummaryRow, TransactionCreate, TransactionUpdate
from src.utils.money import money


SUMMARY_PERIODS = 12


@dataclass(frozen=True)
class TransactionFilters:
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    window: DateWindow = DateWindow(start=None, end=None)


def list_transactions(
    session: Session,
    *,
    user_id: str,
    filters: TransactionFilters,
    page: Page,
) -> list[Transaction]:
    stmt = select(Transaction).where(Transaction.user_id == user_id)
    if filters.account_id:
        stmt = stmt.where(Transaction.account_id == filters.account_id)
    if filters.category_id:
        stmt = stmt.where(Transaction.category_id == filters.category_id)
    for clause in filters.window.clauses(Transaction.transaction_date):
        stmt = stmt.where(clause)
    stmt = (
        stmt.order_by(
            Transaction.transaction_date.desc(),
            Transaction.created_at.desc(),
            Transaction.id.desc(),
        )
        .limit(page.limit)
        .offset(page.offset)
    )
    return list(session.scalars(stmt))


def create_transaction(session: Session, *, user_id: str, payload: TransactionCreate) -> Transaction:
    check_owner(payload.user_id, user_id)
    check_references(session, user_id=user_id, account_id=payload.account_id, category_id=payload.category_id)
    data = payload.model_dump(exclude={"user_id"})
    return insert_row(session, Transaction(user_id=user_id, **data))


def update_transaction(
    session: Session, *, user_id: str, transaction_id: str, patch: TransactionUpdate
) -> Transaction:
    changes = patch.changes()
    check_references(
        session, user_id=user_id, account_id=changes.get("account_id"), category_id=changes.get("category_id")
    )
    return update_owned(session, Transaction, row_id=transaction_id, user_id=user_id, patch=patch)


def delete_transaction(session: Session, *, user_id: str, transaction_id: str) -> int:
    return delete_owned(session, Transaction, row_id=transaction_id, user_id=user_id)


def flow_sums():
    """(income, expense) SUM expressions; direction decides the side, ABS(amount) the size."""
    size = func.abs(Transaction.amount)
    income = func.coalesce(func.sum(case((Transaction.direction == "inflow", size), else_=0)), 0)
    expense = func.coalesce(func.sum(case((Transaction.direction == "outflow", size), else_=0)), 0)
    return income, expense


def summary(session: Session, *, user_id: str, range_: Optional[str] = None) -> list[SummaryRow]:
    """
    Income/expense per month, ISO week or year; the latest 12 periods, newest first.
    """
    grain = (range_ or "month").strip()
    if grain not in SUMMARY_RANGES:
        raise BadRequest("Invalid range. Use 'month', 'week' or 'year'.")
    period = period_key(session, Transaction.transaction_date, grain)
    income, expense = flow_sums()
    stmt = (
        select(period.label("period"), income.label("income"), expense.label("expense"))
        .where(Transaction.user_id == user_id)
        .group_by(period)
        .order_by(period.desc())
        .limit(SUMMARY_PERIODS)
    )
    return [
        SummaryRow(period=_period_text(r.period), income=money(r.income), expense=money(r.expense))
        for r in session.execute(stmt)
    ]


def _period_text(value) -> str:
    if isinstance(value, dt.date):
        return value.isoformat()
    return str(value)

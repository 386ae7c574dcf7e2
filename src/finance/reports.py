from __future__ import annotations

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from src.db.models import Category, Transaction
from src.db.periods import period_key
from src.finance.filters import Page
from src.finance.periods import DateWindow
from src.finance.schemas import IncomeVsExpenseRow, SpendingByCategoryRow
from src.finance.transactions import flow_sums
from src.utils.money import money


def spending_by_category(
    session: Session,
    *,
    user_id: str,
    window: DateWindow,
    page: Page,
    currency: str = "USD",
) -> list[SpendingByCategoryRow]:
    """
    Outflow totals per expense category visible to the user (own + global).

    The window and direction filters live in the LEFT JOIN condition so categories
    without matching transactions still come back with a total of 0.
    """
    join_on = and_(
        Transaction.category_id == Category.id,
        Transaction.user_id == user_id,
        Transaction.direction == "outflow",
        *window.clauses(Transaction.transaction_date),
    )
    total = func.coalesce(func.sum(func.abs(Transaction.amount)), 0)
    stmt = (
        select(Category.name.label("name"), total.label("total"))
        .select_from(Category)
        .outerjoin(Transaction, join_on)
        .where(
            Category.type == "expense",
            or_(Category.user_id == user_id, Category.user_id.is_(None)),
        )
        .group_by(Category.name)
        .order_by(total.desc(), Category.name.asc())
        .limit(page.limit)
        .offset(page.offset)
    )
    return [
        SpendingByCategoryRow(categoryName=r.name, total=money(r.total), currency=currency)
        for r in session.execute(stmt)
    ]


def income_vs_expense(
    session: Session,
    *,
    user_id: str,
    window: DateWindow,
    fill_gaps: bool = False,
) -> list[IncomeVsExpenseRow]:
    """
    Monthly income/expense/net, oldest month first. Months without transactions are
    omitted unless `fill_gaps` is set and the window is bounded.
    """
    period = period_key(session, Transaction.transaction_date, "month")
    income, expense = flow_sums()
    stmt = (
        select(period.label("period"), income.label("income"), expense.label("expense"))
        .where(Transaction.user_id == user_id, *window.clauses(Transaction.transaction_date))
        .group_by(period)
        .order_by(period.asc())
    )
    by_period: dict[str, IncomeVsExpenseRow] = {}
    for r in session.execute(stmt):
        inc, exp = money(r.income), money(r.expense)
        by_period[str(r.period)] = IncomeVsExpenseRow(period=str(r.period), income=inc, expense=exp, net=money(inc - exp))

    if fill_gaps and window.bounded:
        return [
            by_period.get(key) or IncomeVsExpenseRow(period=key, income=0.0, expense=0.0, net=0.0)
            for key in window.months()
        ]
    return list(by_period.values())

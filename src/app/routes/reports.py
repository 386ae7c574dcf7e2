from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import app_settings, db_session
from src.app.deps import pagination
from src.finance import reports
from src.finance.config import Settings
from src.finance.filters import Page
from src.finance.periods import resolve_window
from src.finance.schemas import IncomeVsExpenseRow, SpendingByCategoryRow
from src.finance.security import TokenIdentity
from src.utils.time import today


router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/spending-by-category", response_model=list[SpendingByCategoryRow])
def spending_by_category(
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
    settings: Settings = Depends(app_settings),
    page: Page = Depends(pagination),
    range_: Optional[str] = Query(default=None, alias="range"),
    from_: Optional[str] = Query(default=None, alias="from"),
    to: Optional[str] = Query(default=None),
):
    window = resolve_window(range_, from_, to, today=today(settings.timezone))
    return reports.spending_by_category(
        session, user_id=user.id, window=window, page=page, currency=settings.default_currency
    )


@router.get("/income-vs-expense", response_model=list[IncomeVsExpenseRow])
def income_vs_expense(
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
    settings: Settings = Depends(app_settings),
    range_: Optional[str] = Query(default=None, alias="range"),
    from_: Optional[str] = Query(default=None, alias="from"),
    to: Optional[str] = Query(default=None),
    fill_gaps: bool = Query(default=False),
):
    window = resolve_window(range_, from_, to, today=today(settings.timezone))
    return reports.income_vs_expense(session, user_id=user.id, window=window, fill_gaps=fill_gaps)


@router.get("/alerts")
def alerts(user: TokenIdentity = Depends(require_user)) -> list[dict[str, Any]]:
    return []

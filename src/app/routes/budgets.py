from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import db_session
from src.app.deps import pagination
from src.finance import budgets
from src.finance.errors import BadRequest
from src.finance.filters import Page, optional_id, parse_id
from src.finance.periods import normalize_month
from src.finance.schemas import BudgetCreate, BudgetOut, BudgetUpdate, DeletedOut
from src.finance.security import TokenIdentity


router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.get("", response_model=list[BudgetOut])
def list_budgets(
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
    page: Page = Depends(pagination),
    month: Optional[str] = Query(default=None),
    category_id: Optional[str] = Query(default=None),
):
    month_d = None
    if month:
        try:
            month_d = normalize_month(month)
        except ValueError as e:
            raise BadRequest("Invalid month. Use YYYY-MM or YYYY-MM-DD") from e
    return budgets.list_budgets(
        session,
        user_id=user.id,
        page=page,
        month=month_d,
        category_id=optional_id(category_id, what="category_id"),
    )


@router.post("", status_code=201, response_model=BudgetOut)
def create_budget(
    payload: BudgetCreate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    out = budgets.create_budget(session, user_id=user.id, payload=payload)
    session.commit()
    return out


@router.api_route("/{budget_id}", methods=["PUT", "PATCH"], response_model=BudgetOut)
def update_budget(
    budget_id: str,
    patch: BudgetUpdate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    out = budgets.update_budget(session, user_id=user.id, budget_id=parse_id(budget_id), patch=patch)
    session.commit()
    return out


@router.delete("/{budget_id}", response_model=DeletedOut)
def delete_budget(
    budget_id: str,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    deleted = budgets.delete_budget(session, user_id=user.id, budget_id=parse_id(budget_id))
    session.commit()
    return DeletedOut(deleted=deleted)

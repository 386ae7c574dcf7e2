from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import db_session
from src.app.deps import pagination
from src.finance import transactions
from src.finance.filters import Page, optional_id, parse_id
from src.finance.periods import explicit_window
from src.finance.schemas import DeletedOut, SummaryRow, TransactionCreate, TransactionOut, TransactionUpdate
from src.finance.security import TokenIdentity


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=list[TransactionOut])
def list_transactions(
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
    page: Page = Depends(pagination),
    account_id: Optional[str] = Query(default=None, alias="accountId"),
    from_: Optional[str] = Query(default=None, alias="from"),
    to: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
):
    filters = transactions.TransactionFilters(
        account_id=optional_id(account_id, what="accountId"),
        category_id=optional_id(category, what="category"),
        window=explicit_window(from_, to),
    )
    rows = transactions.list_transactions(session, user_id=user.id, filters=filters, page=page)
    return [TransactionOut.model_validate(r) for r in rows]


# Declared before "/{transaction_id}" routes so "summary" is never read as an id.
@router.get("/summary", response_model=list[SummaryRow])
def transactions_summary(
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
    range_: Optional[str] = Query(default=None, alias="range"),
):
    return transactions.summary(session, user_id=user.id, range_=range_)


@router.post("", status_code=201, response_model=TransactionOut)
def create_transaction(
    payload: TransactionCreate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    row = transactions.create_transaction(session, user_id=user.id, payload=payload)
    out = TransactionOut.model_validate(row)
    session.commit()
    return out


@router.api_route("/{transaction_id}", methods=["PUT", "PATCH"], response_model=TransactionOut)
def update_transaction(
    transaction_id: str,
    patch: TransactionUpdate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    row = transactions.update_transaction(
        session, user_id=user.id, transaction_id=parse_id(transaction_id), patch=patch
    )
    out = TransactionOut.model_validate(row)
    session.commit()
    return out


@router.delete("/{transaction_id}", response_model=DeletedOut)
def delete_transaction(
    transaction_id: str,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    deleted = transactions.delete_transaction(session, user_id=user.id, transaction_id=parse_id(transaction_id))
    session.commit()
    return DeletedOut(deleted=deleted)

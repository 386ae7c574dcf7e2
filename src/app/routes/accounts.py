from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import db_session
from src.app.deps import pagination
from src.finance import accounts
from src.finance.filters import Page, parse_id
from src.finance.schemas import AccountCreate, AccountOut, AccountUpdate, DeletedOut
from src.finance.security import TokenIdentity


router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=list[AccountOut])
def list_accounts(
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
    page: Page = Depends(pagination),
):
    rows = accounts.list_accounts(session, user_id=user.id, page=page)
    return [AccountOut.model_validate(r) for r in rows]


@router.post("", status_code=201, response_model=AccountOut)
def create_account(
    payload: AccountCreate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    out = AccountOut.model_validate(accounts.create_account(session, user_id=user.id, payload=payload))
    session.commit()
    return out


@router.api_route("/{account_id}", methods=["PUT", "PATCH"], response_model=AccountOut)
def update_account(
    account_id: str,
    patch: AccountUpdate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    row = accounts.update_account(session, user_id=user.id, account_id=parse_id(account_id), patch=patch)
    out = AccountOut.model_validate(row)
    session.commit()
    return out


@router.delete("/{account_id}", response_model=DeletedOut)
def delete_account(
    account_id: str,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    deleted = accounts.delete_account(session, user_id=user.id, account_id=parse_id(account_id))
    session.commit()
    return DeletedOut(deleted=deleted)

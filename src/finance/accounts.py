from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.db.models import Account
from src.finance.filters import Page, delete_owned, insert_row, update_owned
from src.finance.schemas import AccountCreate, AccountUpdate


def list_accounts(session: Session, *, user_id: str, page: Page) -> list[Account]:
    stmt = (
        select(Account)
        .where(Account.user_id == user_id)
        .order_by(Account.name.asc(), Account.created_at.asc())
        .limit(page.limit)
        .offset(page.offset)
    )
    return list(session.scalars(stmt))


def create_account(session: Session, *, user_id: str, payload: AccountCreate) -> Account:
    return insert_row(session, Account(user_id=user_id, **payload.model_dump()))


def update_account(session: Session, *, user_id: str, account_id: str, patch: AccountUpdate) -> Account:
    return update_owned(session, Account, row_id=account_id, user_id=user_id, patch=patch)


def delete_account(session: Session, *, user_id: str, account_id: str) -> int:
    return delete_owned(session, Account, row_id=account_id, user_id=user_id)

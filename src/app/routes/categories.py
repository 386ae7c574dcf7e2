from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import db_session
from src.finance import categories
from src.finance.errors import BadRequest
from src.finance.filters import check_owner, optional_id, parse_id
from src.finance.schemas import CategoryCreate, CategoryOut, CategoryUpdate, DeletedOut
from src.finance.security import TokenIdentity


router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOut])
def list_categories(
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
    type_: Optional[str] = Query(default=None, alias="type"),
    user_id: Optional[str] = Query(default=None),
    include_defaults: bool = Query(default=True),
):
    if type_ and type_ not in {"income", "expense"}:
        raise BadRequest("Invalid type. Use 'income' or 'expense'.")
    check_owner(optional_id(user_id, what="user_id"), user.id)
    rows = categories.list_categories(session, user_id=user.id, type_=type_, include_defaults=include_defaults)
    return [CategoryOut.model_validate(c) for c in rows]


@router.post("", status_code=201, response_model=CategoryOut)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    out = CategoryOut.model_validate(categories.create_category(session, user_id=user.id, payload=payload))
    session.commit()
    return out


@router.api_route("/{category_id}", methods=["PUT", "PATCH"], response_model=CategoryOut)
def update_category(
    category_id: str,
    patch: CategoryUpdate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    row = categories.update_category(session, user_id=user.id, category_id=parse_id(category_id), patch=patch)
    out = CategoryOut.model_validate(row)
    session.commit()
    return out


@router.delete("/{category_id}", response_model=DeletedOut)
def delete_category(
    category_id: str,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    deleted = categories.delete_category(session, user_id=user.id, category_id=parse_id(category_id))
    session.commit()
    return DeletedOut(deleted=deleted)

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.db.integrity import is_unique_violation
from src.db.models import Account, Category
from src.finance.errors import BadRequest, Conflict, NotFound, ValidationError
from src.finance.schemas import PatchModel, canonical_id
from src.utils.time import utcnow


MAX_LIMIT = 200
DEFAULT_LIMIT = 50


@dataclass(frozen=True)
class Page:
    limit: int = DEFAULT_LIMIT
    offset: int = 0


def page(limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
    """Clamp limit into [1, MAX_LIMIT]; offset must not be negative."""
    lim = DEFAULT_LIMIT if limit is None else max(1, min(int(limit), MAX_LIMIT))
    off = 0 if offset is None else int(offset)
    if off < 0:
        raise BadRequest("Invalid offset")
    return Page(limit=lim, offset=off)


def parse_id(value: Optional[str], *, what: str = "id") -> str:
    try:
        return canonical_id(value)
    except ValueError as e:
        raise BadRequest(f"Invalid {what}") from e


def optional_id(value: Optional[str], *, what: str) -> Optional[str]:
    if value is None or value == "":
        return None
    return parse_id(value, what=what)


def check_owner(body_user_id: Optional[str], user_id: str) -> None:
    """A body `user_id` is tolerated only when it names the caller."""
    if body_user_id is not None and body_user_id != user_id:
        raise ValidationError.for_field("user_id", "must match the authenticated user")


def invalid_reference(field: str = "body", message: str = "references a missing record") -> ValidationError:
    return ValidationError("Invalid reference", detail=[{"field": field, "message": message}])


def check_references(
    session: Session,
    *,
    user_id: str,
    account_id: Optional[str] = None,
    category_id: Optional[str] = None,
) -> None:
    """Accounts must be the caller's; categories the caller's or global."""
    if account_id is not None:
        owner = session.execute(select(Account.user_id).where(Account.id == account_id)).first()
        if owner is None or owner.user_id != user_id:
            raise invalid_reference("account_id", "unknown account")
    if category_id is not None:
        owner = session.execute(select(Category.user_id).where(Category.id == category_id)).first()
        if owner is None or owner.user_id not in (None, user_id):
            raise invalid_reference("category_id", "unknown category")


def integrity_error(exc: IntegrityError, *, conflict_message: str) -> Exception:
    if is_unique_violation(exc):
        return Conflict(conflict_message)
    return invalid_reference()


def insert_row(session: Session, row: Any, *, conflict_message: str = "Already exists") -> Any:
    session.add(row)
    try:
        session.flush()
    except IntegrityError as e:
        session.rollback()
        raise integrity_error(e, conflict_message=conflict_message) from e
    return row


def update_owned(
    session: Session,
    model: type,
    *,
    row_id: str,
    user_id: str,
    patch: PatchModel,
    conflict_message: str = "Already exists",
    extra: Optional[dict[str, Any]] = None,
) -> Any:
    """
    Single `UPDATE ... RETURNING` over the patch's allow-listed columns, scoped to
    the owner. Raises BadRequest on an empty patch and NotFound when no row matched.
    """
    changes = patch.changes()
    if extra:
        changes.update(extra)
    if not changes:
        raise BadRequest("No fields to update")
    changes["updated_at"] = utcnow()
    stmt = (
        update(model)
        .where(model.id == row_id, model.user_id == user_id)
        .values(**changes)
        .returning(model)
        .execution_options(synchronize_session="fetch")
    )
    try:
        row = session.scalars(stmt).one_or_none()
    except IntegrityError as e:
        session.rollback()
        raise integrity_error(e, conflict_message=conflict_message) from e
    if row is None:
        raise NotFound("Not found")
    return row


def delete_owned(session: Session, model: type, *, row_id: str, user_id: str) -> int:
    result = session.execute(
        delete(model).where(model.id == row_id, model.user_id == user_id).execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from src.db.models import User
from src.finance.config import Settings
from src.finance.errors import BadRequest, NotFound, Unauthorized
from src.finance.filters import insert_row
from src.finance.schemas import LoginIn, ProfileUpdate, RegisterIn
from src.finance.security import hash_password, issue_token, verify_password
from src.utils.time import utcnow

log = logging.getLogger(__name__)


def register(session: Session, settings: Settings, payload: RegisterIn) -> User:
    user = User(
        email=payload.email,
        password_hash=hash_password(payload.password, rounds=settings.bcrypt_rounds),
        name=payload.name,
        notification_preferences={},
    )
    insert_row(session, user, conflict_message="Email already in use")
    log.info("Registered user %s", payload.email)
    return user


def login(session: Session, settings: Settings, payload: LoginIn) -> tuple[str, User]:
    user = session.query(User).filter(User.email == payload.email).one_or_none()
    if user is None or not verify_password(payload.password, user.password_hash):
        log.info("Failed login for %s", payload.email)
        raise Unauthorized("Invalid credentials")
    token = issue_token(settings, user_id=user.id, email=user.email)
    return token, user


def get_profile(session: Session, *, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound("Profile not found")
    return user


def update_profile(session: Session, *, user_id: str, patch: ProfileUpdate) -> User:
    changes = patch.changes()
    if not changes:
        raise BadRequest("No fields to update")
    changes["updated_at"] = utcnow()
    stmt = (
        update(User)
        .where(User.id == user_id)
        .values(**changes)
        .returning(User)
        .execution_options(synchronize_session="fetch")
    )
    user = session.scalars(stmt).one_or_none()
    if user is None:
        raise NotFound("Profile not found")
    return user

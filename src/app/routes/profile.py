from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import db_session
from src.finance import users
from src.finance.schemas import ProfileUpdate, UserOut
from src.finance.security import TokenIdentity


router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=UserOut)
def get_profile(
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    return UserOut.model_validate(users.get_profile(session, user_id=user.id))


@router.api_route("", methods=["PUT", "PATCH"], response_model=UserOut)
def update_profile(
    patch: ProfileUpdate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    out = UserOut.model_validate(users.update_profile(session, user_id=user.id, patch=patch))
    session.commit()
    return out

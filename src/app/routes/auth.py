from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.app.db import app_settings, db_session
from src.finance import users
from src.finance.config import Settings
from src.finance.schemas import LoginIn, LoginOut, RegisterIn, RegisterOut, UserOut


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201, response_model=RegisterOut)
def register(
    payload: RegisterIn,
    session: Session = Depends(db_session),
    settings: Settings = Depends(app_settings),
):
    user = users.register(session, settings, payload)
    out = RegisterOut(user=UserOut.model_validate(user))
    session.commit()
    return out


@router.post("/login", response_model=LoginOut)
def login(
    payload: LoginIn,
    session: Session = Depends(db_session),
    settings: Settings = Depends(app_settings),
):
    token, user = users.login(session, settings, payload)
    return LoginOut(token=token, user=UserOut.model_validate(user))

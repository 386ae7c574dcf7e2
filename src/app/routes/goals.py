from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.app.auth import require_user
from src.app.db import db_session
from src.app.deps import pagination
from src.finance import goals
from src.finance.filters import Page, parse_id
from src.finance.schemas import DeletedOut, GoalCreate, GoalOut, GoalUpdate
from src.finance.security import TokenIdentity


router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("", response_model=list[GoalOut])
def list_goals(
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
    page: Page = Depends(pagination),
):
    return [GoalOut.model_validate(g) for g in goals.list_goals(session, user_id=user.id, page=page)]


@router.post("", status_code=201, response_model=GoalOut)
def create_goal(
    payload: GoalCreate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    out = GoalOut.model_validate(goals.create_goal(session, user_id=user.id, payload=payload))
    session.commit()
    return out


@router.api_route("/{goal_id}", methods=["PUT", "PATCH"], response_model=GoalOut)
def update_goal(
    goal_id: str,
    patch: GoalUpdate,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    out = GoalOut.model_validate(goals.update_goal(session, user_id=user.id, goal_id=parse_id(goal_id), patch=patch))
    session.commit()
    return out


@router.delete("/{goal_id}", response_model=DeletedOut)
def delete_goal(
    goal_id: str,
    session: Session = Depends(db_session),
    user: TokenIdentity = Depends(require_user),
):
    deleted = goals.delete_goal(session, user_id=user.id, goal_id=parse_id(goal_id))
    session.commit()
    return DeletedOut(deleted=deleted)

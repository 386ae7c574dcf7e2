from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.db.models import Goal
from src.finance.filters import Page, check_owner, delete_owned, insert_row, update_owned
from src.finance.schemas import GoalCreate, GoalUpdate


def list_goals(session: Session, *, user_id: str, page: Page) -> list[Goal]:
    stmt = (
        select(Goal)
        .where(Goal.user_id == user_id)
        .order_by(Goal.created_at.desc(), Goal.id.asc())
        .limit(page.limit)
        .offset(page.offset)
    )
    return list(session.scalars(stmt))


def create_goal(session: Session, *, user_id: str, payload: GoalCreate) -> Goal:
    check_owner(payload.user_id, user_id)
    data = payload.model_dump(exclude={"user_id"})
    return insert_row(session, Goal(user_id=user_id, **data))


def update_goal(session: Session, *, user_id: str, goal_id: str, patch: GoalUpdate) -> Goal:
    return update_owned(session, Goal, row_id=goal_id, user_id=user_id, patch=patch)


def delete_goal(session: Session, *, user_id: str, goal_id: str) -> int:
    return delete_owned(session, Goal, row_id=goal_id, user_id=user_id)

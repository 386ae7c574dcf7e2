from __future__ import annotations

from sqlalchemy import func, literal_column
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement


def dialect_name(session: Session) -> str:
    return session.get_bind().dialect.name


def _lit(text: str) -> ColumnElement:
    # Inline literal: the same expression must render identically in SELECT and GROUP BY.
    return literal_column(f"'{text}'")


def period_key(session: Session, column, grain: str = "month") -> ColumnElement:
    """
    SQL expression bucketing a DATE column into a sortable text key.

    - month -> "YYYY-MM"
    - year  -> "YYYY"
    - week  -> ISO date of the week's Monday, "YYYY-MM-DD"
    """
    if grain not in {"month", "year", "week"}:
        raise ValueError(f"Unknown period grain: {grain}")
    if dialect_name(session) == "postgresql":
        if grain == "week":
            return func.to_char(func.date_trunc(_lit("week"), column), _lit("YYYY-MM-DD"))
        return func.to_char(column, _lit("YYYY-MM" if grain == "month" else "YYYY"))
    # SQLite stores DATE as ISO text.
    if grain == "week":
        return func.date(column, _lit("weekday 0"), _lit("-6 days"))
    return func.strftime(_lit("%Y-%m" if grain == "month" else "%Y"), column)

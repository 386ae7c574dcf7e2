from __future__ import annotations

from sqlalchemy.exc import IntegrityError

_PG_UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return str(code) == _PG_UNIQUE_VIOLATION
    msg = str(orig or exc).lower()
    return "unique constraint" in msg or "duplicate key" in msg

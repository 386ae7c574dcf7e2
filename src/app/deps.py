from __future__ import annotations

from typing import Optional

from fastapi import Query

from src.finance.filters import Page, page


def pagination(
    limit: Optional[int] = Query(default=None),
    offset: Optional[int] = Query(default=None),
) -> Page:
    return page(limit, offset)

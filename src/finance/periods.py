from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Any, Optional

from src.finance.errors import BadRequest
from src.utils.time import add_months, month_end, month_start, year_month


_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})(?:-(\d{2}))?$")

REPORT_RANGES = ("month", "quarter", "3months")
SUMMARY_RANGES = ("month", "week", "year")


def strict_iso_date(value: Any) -> dt.date:
    """
    Parse a strict "YYYY-MM-DD" calendar date. Raises ValueError otherwise.
    """
    if isinstance(value, dt.datetime):
        raise ValueError("must be a date in YYYY-MM-DD format")
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        raise ValueError("must be a date in YYYY-MM-DD format")
    try:
        return dt.date.fromisoformat(value)
    except ValueError as e:
        raise ValueError("must be a valid calendar date") from e


def normalize_month(value: Any) -> dt.date:
    """
    "2025-03" / "2025-03-17" / date -> first day of that month.
    """
    if isinstance(value, dt.date) and not isinstance(value, dt.datetime):
        return month_start(value)
    m = _MONTH_RE.match(value) if isinstance(value, str) else None
    if not m:
        raise ValueError("must be YYYY-MM or YYYY-MM-DD")
    year, month, day = int(m.group(1)), int(m.group(2)), m.group(3)
    try:
        first = dt.date(year, month, 1)
        if day is not None:
            # Reject impossible days such as 2025-02-30 rather than silently truncating.
            dt.date(year, month, int(day))
    except ValueError as e:
        raise ValueError("must be a valid calendar month") from e
    return first


def parse_query_date(value: Optional[str], *, field: str) -> Optional[dt.date]:
    if value is None or value == "":
        return None
    try:
        return strict_iso_date(value)
    except ValueError as e:
        raise BadRequest(f"Invalid {field} date. Use YYYY-MM-DD") from e


@dataclass(frozen=True)
class DateWindow:
    """Inclusive date window; either bound may be open."""

    start: Optional[dt.date]
    end: Optional[dt.date]

    @property
    def bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def clauses(self, column) -> list:
        out = []
        if self.start is not None:
            out.append(column >= self.start)
        if self.end is not None:
            out.append(column <= self.end)
        return out

    def months(self) -> list[str]:
        """All "YYYY-MM" keys covered by a bounded window, ascending."""
        if not self.bounded:
            return []
        keys: list[str] = []
        cur = month_start(self.start)
        while cur <= self.end:
            keys.append(year_month(cur))
            cur = add_months(cur, 1)
        return keys


def range_window(range_: str, *, today: dt.date) -> DateWindow:
    if range_ == "month":
        return DateWindow(start=month_start(today), end=month_end(today))
    if range_ in {"quarter", "3months"}:
        return DateWindow(start=add_months(month_start(today), -2), end=month_end(today))
    raise BadRequest("Invalid range. Use 'month', 'quarter' or '3months'.")


def resolve_window(
    range_: Optional[str],
    from_: Optional[str],
    to: Optional[str],
    *,
    today: dt.date,
) -> DateWindow:
    """
    Explicit from/to override the range keyword. With only one bound given the
    window is open on the other side. Everything is validated before any query runs.
    """
    r = (range_ or "month").strip()
    if r not in REPORT_RANGES:
        raise BadRequest("Invalid range. Use 'month', 'quarter' or '3months'.")
    window = explicit_window(from_, to)
    if window.start is not None or window.end is not None:
        return window
    return range_window(r, today=today)


def explicit_window(from_: Optional[str], to: Optional[str]) -> DateWindow:
    start = parse_query_date(from_, field="from")
    end = parse_query_date(to, field="to")
    if start is not None and end is not None and start > end:
        raise BadRequest("Invalid window: from must be on or before to")
    return DateWindow(start=start, end=end)

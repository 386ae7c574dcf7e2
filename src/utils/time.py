from __future__ import annotations

import datetime as dt
import os
from functools import lru_cache
from zoneinfo import ZoneInfo

UTC = dt.timezone.utc


def utcnow() -> dt.datetime:
    return dt.datetime.now(UTC)


@lru_cache(maxsize=32)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def app_timezone_name() -> str:
    return os.environ.get("APP_TIMEZONE", "UTC").strip() or "UTC"


def today(tz_name: str | None = None) -> dt.date:
    """Calendar date "now" in the application timezone."""
    return utcnow().astimezone(_zone(tz_name or app_timezone_name())).date()


def month_start(d: dt.date) -> dt.date:
    return d.replace(day=1)


def month_end(d: dt.date) -> dt.date:
    end = dt.date(d.year, d.month, 28) + dt.timedelta(days=4)
    return end.replace(day=1) - dt.timedelta(days=1)


def add_months(d: dt.date, months: int) -> dt.date:
    """Shift a first-of-month date by whole months."""
    idx = d.year * 12 + (d.month - 1) + months
    return dt.date(idx // 12, idx % 12 + 1, 1)


def year_month(d: dt.date) -> str:
    return f"{d.year:04d}-{d.month:02d}"

from __future__ import annotations

import datetime as dt
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.types import DateTime as _DateTime
from sqlalchemy.types import Numeric as _Numeric
from sqlalchemy.types import TypeDecorator

from src.utils.time import UTC


class UTCDateTime(TypeDecorator):
    """
    Store datetimes as naive UTC and always return tz-aware UTC datetimes.

    SQLite has no timezone-aware datetime type, so naive values are treated as UTC.
    """

    impl = _DateTime
    cache_ok = True

    def process_bind_param(self, value: dt.datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: dt.datetime | None, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class Money(TypeDecorator):
    """
    NUMERIC(14, 2) that accepts and returns plain floats.

    Binding goes through Decimal so PostgreSQL and SQLite round the same way.
    """

    impl = _Numeric(14, 2, asdecimal=False)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        d = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        # pysqlite can't bind Decimal natively.
        return float(d) if dialect.name == "sqlite" else d

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return float(value)

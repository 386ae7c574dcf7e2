from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


def _to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    s = str(value).strip()
    if not s:
        return None
    s = s.replace(",", "")
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


def money(value: Any) -> float:
    """
    Round a DB aggregate (Decimal, float, int or None) to cents.

    SUM() comes back as Decimal on PostgreSQL and float/int on SQLite; API
    payloads always carry plain JSON numbers.
    """
    d = _to_decimal(value)
    if d is None:
        return 0.0
    return float(d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_money(value: Any, currency: str = "USD", digits: int = 2, dash: str = "-") -> str:
    """
    Jinja-friendly currency formatter.

    - `None` -> dash
    - numeric -> "$1,234.56" for USD, "1,234.56 EUR" otherwise
    - non-numeric string -> returned as-is
    """
    d = _to_decimal(value)
    if d is None:
        if value is None:
            return dash
        s = str(value).strip()
        return s if s else dash

    digits = max(0, int(digits))
    q = Decimal(1) if digits == 0 else Decimal("1").scaleb(-digits)
    d = d.quantize(q, rounding=ROUND_HALF_UP)

    sign = "-" if d < 0 else ""
    d_abs = -d if d < 0 else d
    if (currency or "USD").upper() == "USD":
        return f"{sign}${d_abs:,.{digits}f}"
    return f"{sign}{d_abs:,.{digits}f} {currency.upper()}"

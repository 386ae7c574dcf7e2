from __future__ import annotations

from decimal import Decimal

from src.utils.money import format_money, money


def test_money_rounds_aggregates_to_cents() -> None:
    assert money(None) == 0.0
    assert money(Decimal("12.345")) == 12.35
    assert money(0.1 + 0.2) == 0.3
    assert money(7) == 7.0


def test_format_money() -> None:
    assert format_money(1234.5) == "$1,234.50"
    assert format_money(-12) == "-$12.00"
    assert format_money(99.999, "eur") == "100.00 EUR"
    assert format_money(None) == "-"
    assert format_money("n/a") == "n/a"

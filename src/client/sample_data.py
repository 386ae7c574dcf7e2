"""
Deterministic sample data for the dashboard's mock mode.

Shapes match the API responses. Everything is anchored at SAMPLE_TODAY so the
"current month" views are stable.
"""
from __future__ import annotations

import datetime as dt
from typing import Any

SAMPLE_TODAY = dt.date(2025, 7, 15)

USER_ID = "00000000-0000-4000-8000-000000000001"

CHECKING = "00000000-0000-4000-8000-0000000000a1"
CREDIT_CARD = "00000000-0000-4000-8000-0000000000a2"

GROCERIES = "00000000-0000-4000-8000-0000000000c1"
DINING = "00000000-0000-4000-8000-0000000000c2"
RENT = "00000000-0000-4000-8000-0000000000c3"
UTILITIES = "00000000-0000-4000-8000-0000000000c4"
TRANSPORT = "00000000-0000-4000-8000-0000000000c5"
ENTERTAINMENT = "00000000-0000-4000-8000-0000000000c6"
SALARY = "00000000-0000-4000-8000-0000000000c7"
FREELANCE = "00000000-0000-4000-8000-0000000000c8"


def _stamp(day: str) -> str:
    return f"{day}T12:00:00+00:00"


def _category(cid: str, name: str, type_: str, icon: str) -> dict[str, Any]:
    return {"id": cid, "user_id": None, "name": name, "type": type_, "icon": icon, "is_default": True}


def _txn(n: int, day: str, category_id: str, amount: float, direction: str, description: str, account_id: str = CHECKING) -> dict[str, Any]:
    return {
        "id": f"00000000-0000-4000-8000-{n:012d}",
        "user_id": USER_ID,
        "account_id": account_id,
        "category_id": category_id,
        "amount": amount,
        "direction": direction,
        "description": description,
        "transaction_date": day,
        "created_at": _stamp(day),
        "updated_at": _stamp(day),
    }


USER = {
    "id": USER_ID,
    "email": "demo@example.com",
    "name": "Demo User",
    "notification_preferences": {"budget_alerts": True},
}

SAMPLE_DATA: dict[str, list[dict[str, Any]]] = {
    "accounts": [
        {
            "id": CHECKING,
            "user_id": USER_ID,
            "institution": "Chase",
            "name": "Everyday Checking",
            "last4": "1234",
            "type": "checking",
            "balance": 5240.18,
            "currency": "USD",
            "created_at": _stamp("2025-01-02"),
            "updated_at": _stamp("2025-01-02"),
        },
        {
            "id": CREDIT_CARD,
            "user_id": USER_ID,
            "institution": "American Express",
            "name": "Blue Cash",
            "last4": "9876",
            "type": "credit",
            "balance": -812.40,
            "currency": "USD",
            "created_at": _stamp("2025-01-02"),
            "updated_at": _stamp("2025-01-02"),
        },
    ],
    "categories": [
        _category(GROCERIES, "Groceries", "expense", "cart"),
        _category(DINING, "Dining", "expense", "utensils"),
        _category(RENT, "Rent", "expense", "home"),
        _category(UTILITIES, "Utilities", "expense", "bolt"),
        _category(TRANSPORT, "Transport", "expense", "car"),
        _category(ENTERTAINMENT, "Entertainment", "expense", "film"),
        _category(SALARY, "Salary", "income", "briefcase"),
        _category(FREELANCE, "Freelance", "income", "laptop"),
    ],
    "transactions": [
        _txn(101, "2025-05-01", SALARY, 4000.00, "inflow", "May salary"),
        _txn(102, "2025-05-02", RENT, 1500.00, "outflow", "May rent"),
        _txn(103, "2025-05-09", GROCERIES, 388.20, "outflow", "Whole Foods", CREDIT_CARD),
        _txn(104, "2025-05-17", DINING, 142.75, "outflow", "Dinner out", CREDIT_CARD),
        _txn(105, "2025-05-21", UTILITIES, 118.34, "outflow", "Electric bill"),
        _txn(201, "2025-06-01", SALARY, 4000.00, "inflow", "June salary"),
        _txn(202, "2025-06-02", RENT, 1500.00, "outflow", "June rent"),
        _txn(203, "2025-06-08", GROCERIES, 402.10, "outflow", "Trader Joe's", CREDIT_CARD),
        _txn(204, "2025-06-14", FREELANCE, 650.00, "inflow", "Logo design"),
        _txn(205, "2025-06-20", ENTERTAINMENT, 64.00, "outflow", "Concert tickets", CREDIT_CARD),
        _txn(206, "2025-06-24", UTILITIES, 121.90, "outflow", "Electric bill"),
        _txn(301, "2025-07-01", SALARY, 4000.00, "inflow", "July salary"),
        _txn(302, "2025-07-02", RENT, 1500.00, "outflow", "July rent"),
        _txn(303, "2025-07-05", GROCERIES, 420.00, "outflow", "Costco run", CREDIT_CARD),
        _txn(304, "2025-07-09", DINING, 180.00, "outflow", "Birthday dinner", CREDIT_CARD),
        _txn(305, "2025-07-11", TRANSPORT, 60.00, "outflow", "Transit pass"),
        _txn(306, "2025-07-12", GROCERIES, 95.50, "outflow", "Farmers market", CREDIT_CARD),
    ],
    "budgets": [
        {
            "id": "00000000-0000-4000-8000-0000000000b1",
            "user_id": USER_ID,
            "category_id": GROCERIES,
            "month": "2025-07-01",
            "limit_amount": 500.00,
            "created_at": _stamp("2025-07-01"),
            "updated_at": _stamp("2025-07-01"),
        },
        {
            "id": "00000000-0000-4000-8000-0000000000b2",
            "user_id": USER_ID,
            "category_id": DINING,
            "month": "2025-07-01",
            "limit_amount": 190.00,
            "created_at": _stamp("2025-07-01"),
            "updated_at": _stamp("2025-07-01"),
        },
        {
            "id": "00000000-0000-4000-8000-0000000000b3",
            "user_id": USER_ID,
            "category_id": TRANSPORT,
            "month": "2025-07-01",
            "limit_amount": 200.00,
            "created_at": _stamp("2025-07-01"),
            "updated_at": _stamp("2025-07-01"),
        },
    ],
    "goals": [
        {
            "id": "00000000-0000-4000-8000-0000000000d1",
            "user_id": USER_ID,
            "name": "Emergency fund",
            "target_amount": 10000.00,
            "current_amount": 3500.00,
            "target_date": "2025-12-31",
            "created_at": _stamp("2025-02-01"),
            "updated_at": _stamp("2025-02-01"),
        },
        {
            "id": "00000000-0000-4000-8000-0000000000d2",
            "user_id": USER_ID,
            "name": "Summer vacation",
            "target_amount": 3000.00,
            "current_amount": 1200.00,
            "target_date": None,
            "created_at": _stamp("2025-03-15"),
            "updated_at": _stamp("2025-03-15"),
        },
    ],
}

from __future__ import annotations

from typing import Any, Iterable

WARNING_RATIO = 0.9


def derive_alerts(budgets: Iterable[dict[str, Any]], categories: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Budget alerts from enriched budget rows (`spent` included):

    - budget_exceeded: spent > limit
    - budget_warning:  spent > 90% of limit
    """
    names = {c.get("id"): c.get("name") for c in categories}
    alerts: list[dict[str, Any]] = []
    for b in budgets:
        limit = float(b.get("limit_amount") or 0)
        if limit <= 0:
            continue
        spent = float(b.get("spent") or 0)
        category_id = b.get("category_id")
        name = names.get(category_id) or category_id
        base = {"category_id": category_id, "amount": round(spent, 2), "budget": limit, "month": b.get("month")}
        if spent > limit:
            alerts.append(
                {
                    "id": f"alert_{category_id}",
                    "type": "budget_exceeded",
                    "message": f"{name} is over budget by ${spent - limit:.2f} this month.",
                    **base,
                }
            )
        elif spent > WARNING_RATIO * limit:
            alerts.append(
                {
                    "id": f"warn_{category_id}",
                    "type": "budget_warning",
                    "message": f"{name} reached {100 * spent / limit:.0f}% of budget.",
                    **base,
                }
            )
    return alerts

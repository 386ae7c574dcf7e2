from __future__ import annotations

import copy
import datetime as dt
import urllib.parse
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from pydantic import ValidationError as PydanticValidationError

from src.client.api import ApiClient, ApiError
from src.client.sample_data import SAMPLE_DATA, SAMPLE_TODAY, USER
from src.finance import schemas
from src.finance.errors import FinanceError
from src.finance.filters import page
from src.finance.periods import DateWindow, explicit_window, normalize_month, resolve_window
from src.utils.money import money
from src.utils.time import today as local_today
from src.utils.time import utcnow

RESOURCES = ("accounts", "transactions", "budgets", "goals", "categories")
REPORTS = ("spending-by-category", "income-vs-expense")

_CREATE_SCHEMAS = {
    "accounts": schemas.AccountCreate,
    "transactions": schemas.TransactionCreate,
    "budgets": schemas.BudgetCreate,
    "goals": schemas.GoalCreate,
    "categories": schemas.CategoryCreate,
}
_UPDATE_SCHEMAS = {
    "accounts": schemas.AccountUpdate,
    "transactions": schemas.TransactionUpdate,
    "budgets": schemas.BudgetUpdate,
    "goals": schemas.GoalUpdate,
    "categories": schemas.CategoryUpdate,
}


def _check_resource(resource: str) -> None:
    if resource not in RESOURCES:
        raise ValueError(f"Unknown resource: {resource}")


def _check_report(name: str) -> None:
    if name not in REPORTS:
        raise ValueError(f"Unknown report: {name}")


def query_params(params: dict[str, Any]) -> dict[str, Any]:
    """Python-side keyword names to API query names (`from_` -> `from`)."""
    out: dict[str, Any] = {}
    for k, v in params.items():
        if v is None:
            continue
        out[k.rstrip("_")] = v
    return out


class DataProvider(ABC):
    """What the dashboard needs from a backend: auth, resource CRUD and reports."""

    mock = False

    def today(self) -> dt.date:
        return local_today()

    @abstractmethod
    def login(self, email: str, password: str) -> dict[str, Any]: ...

    @abstractmethod
    def list(self, resource: str, **params: Any) -> list[dict[str, Any]]: ...

    @abstractmethod
    def create(self, resource: str, payload: dict[str, Any]) -> dict[str, Any]: ...

    @abstractmethod
    def update(self, resource: str, row_id: str, payload: dict[str, Any]) -> dict[str, Any]: ...

    @abstractmethod
    def delete(self, resource: str, row_id: str) -> int: ...

    @abstractmethod
    def report(self, name: str, **params: Any) -> list[dict[str, Any]]: ...


class HttpDataProvider(DataProvider):
    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, email: str, password: str) -> dict[str, Any]:
        return self.client.login(email, password)

    def list(self, resource: str, **params: Any) -> list[dict[str, Any]]:
        _check_resource(resource)
        return self.client.get(f"/{resource}", **query_params(params)) or []

    def create(self, resource: str, payload: dict[str, Any]) -> dict[str, Any]:
        _check_resource(resource)
        return self.client.post(f"/{resource}", payload)

    def update(self, resource: str, row_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        _check_resource(resource)
        return self.client.put(f"/{resource}/{urllib.parse.quote(row_id, safe='')}", payload)

    def delete(self, resource: str, row_id: str) -> int:
        _check_resource(resource)
        data = self.client.delete(f"/{resource}/{urllib.parse.quote(row_id, safe='')}")
        return int((data or {}).get("deleted") or 0)

    def report(self, name: str, **params: Any) -> list[dict[str, Any]]:
        _check_report(name)
        return self.client.get(f"/reports/{name}", **query_params(params)) or []


@contextmanager
def _as_api_error() -> Iterator[None]:
    try:
        yield
    except FinanceError as e:
        raise ApiError(e.status_code, e.message, e.detail) from e
    except PydanticValidationError as e:
        detail = [
            {"field": ".".join(str(p) for p in err.get("loc", ())) or "body", "message": str(err.get("msg"))}
            for err in e.errors()
        ]
        raise ApiError(400, "Invalid body", detail) from e


def _parse_id(row_id: str) -> str:
    try:
        return schemas.canonical_id(row_id)
    except ValueError as e:
        raise ApiError(400, "Invalid id") from e


def _in_window(window: DateWindow, day: str) -> bool:
    d = dt.date.fromisoformat(day)
    if window.start is not None and d < window.start:
        return False
    if window.end is not None and d > window.end:
        return False
    return True


class FakeDataProvider(DataProvider):
    """
    In-memory stand-in for the API, used in mock mode.

    Each instance owns a deep copy of the sample data, so two dashboards (or two
    tests) never see each other's writes. Validation, ids, `deleted` counts,
    budget `spent`/`overrun` and both reports follow the API's behavior.
    """

    mock = True

    def __init__(
        self,
        sample: Optional[dict[str, list[dict[str, Any]]]] = None,
        *,
        today: dt.date = SAMPLE_TODAY,
        user: Optional[dict[str, Any]] = None,
    ):
        self._data = copy.deepcopy(sample if sample is not None else SAMPLE_DATA)
        for resource in RESOURCES:
            self._data.setdefault(resource, [])
        self._today = today
        self.user = copy.deepcopy(user or USER)

    def today(self) -> dt.date:
        return self._today

    def login(self, email: str, password: str) -> dict[str, Any]:
        if not (email or "").strip() or not password:
            raise ApiError(400, "Invalid body", [{"field": "email", "message": "email and password are required"}])
        return {"token": "mock-token", "user": copy.deepcopy(self.user)}

    # --- reads --------------------------------------------------------------

    def _spent(self, budget: dict[str, Any]) -> float:
        month_key = str(budget["month"])[:7]
        total = sum(
            abs(float(t["amount"]))
            for t in self._data["transactions"]
            if t.get("category_id") == budget["category_id"]
            and t["direction"] == "outflow"
            and str(t["transaction_date"])[:7] == month_key
        )
        return money(total)

    def _enrich(self, budget: dict[str, Any]) -> dict[str, Any]:
        spent = self._spent(budget)
        return {**copy.deepcopy(budget), "spent": spent, "overrun": spent > float(budget["limit_amount"])}

    def list(self, resource: str, **params: Any) -> list[dict[str, Any]]:
        _check_resource(resource)
        params = query_params(params)
        with _as_api_error():
            pg = page(params.get("limit"), params.get("offset"))
            rows = self._select(resource, params)
        if resource == "categories":
            return rows
        return rows[pg.offset : pg.offset + pg.limit]

    def _select(self, resource: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        rows = [copy.deepcopy(r) for r in self._data[resource]]
        if resource == "transactions":
            window = explicit_window(params.get("from"), params.get("to"))
            rows = [
                r
                for r in rows
                if _in_window(window, r["transaction_date"])
                and (not params.get("accountId") or r.get("account_id") == params["accountId"])
                and (not params.get("category") or r.get("category_id") == params["category"])
            ]
            rows.sort(key=lambda r: (r["transaction_date"], r["created_at"]), reverse=True)
        elif resource == "budgets":
            if params.get("month"):
                try:
                    month = normalize_month(params["month"]).isoformat()
                except ValueError as e:
                    raise ApiError(400, "Invalid month. Use YYYY-MM or YYYY-MM-DD") from e
                rows = [r for r in rows if r["month"] == month]
            if params.get("category_id"):
                rows = [r for r in rows if r["category_id"] == params["category_id"]]
            rows.sort(key=lambda r: r["created_at"], reverse=True)
            rows.sort(key=lambda r: r["month"], reverse=True)
            rows = [self._enrich(r) for r in rows]
        elif resource == "categories":
            if params.get("type"):
                rows = [r for r in rows if r["type"] == params["type"]]
            if str(params.get("include_defaults", "true")).lower() in {"false", "0"}:
                rows = [r for r in rows if r.get("user_id") is not None]
            rows.sort(key=lambda r: r["name"])
        elif resource == "goals":
            rows.sort(key=lambda r: r["created_at"], reverse=True)
        else:
            rows.sort(key=lambda r: r["name"])
        return rows

    # --- writes -------------------------------------------------------------

    def _find(self, resource: str, row_id: str) -> Optional[dict[str, Any]]:
        for row in self._data[resource]:
            if row["id"] == row_id and row.get("user_id") == self.user["id"]:
                return row
        return None

    def _check_budget_unique(self, candidate: dict[str, Any], *, exclude_id: Optional[str] = None) -> None:
        for b in self._data["budgets"]:
            if b["id"] == exclude_id:
                continue
            if b["category_id"] == candidate["category_id"] and b["month"] == candidate["month"]:
                raise ApiError(409, "Budget already exists for this category and month")

    def create(self, resource: str, payload: dict[str, Any]) -> dict[str, Any]:
        _check_resource(resource)
        with _as_api_error():
            model = _CREATE_SCHEMAS[resource].model_validate(payload)
        data = model.model_dump(mode="json", exclude={"user_id", "period"})
        if getattr(model, "user_id", None) not in (None, self.user["id"]):
            raise ApiError(400, "Invalid input", [{"field": "user_id", "message": "must match the authenticated user"}])
        now = utcnow().isoformat()
        row = {**data, "id": str(uuid.uuid4()), "user_id": self.user["id"], "created_at": now, "updated_at": now}
        if resource == "categories":
            row.pop("created_at")
            row.pop("updated_at")
            row["is_default"] = False
        if resource == "budgets":
            self._check_budget_unique(row)
        self._data[resource].append(row)
        return self._enrich(row) if resource == "budgets" else copy.deepcopy(row)

    def update(self, resource: str, row_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        _check_resource(resource)
        row_id = _parse_id(row_id)
        with _as_api_error():
            patch = _UPDATE_SCHEMAS[resource].model_validate(payload)
        changes = {
            k: v for k, v in patch.model_dump(mode="json", exclude_unset=True).items() if k not in patch.not_stored
        }
        if not changes:
            raise ApiError(400, "No fields to update")
        row = self._find(resource, row_id)
        if row is None:
            raise ApiError(404, "Not found")
        if resource == "budgets":
            self._check_budget_unique({**row, **changes}, exclude_id=row_id)
        row.update(changes)
        if "updated_at" in row:
            row["updated_at"] = utcnow().isoformat()
        return self._enrich(row) if resource == "budgets" else copy.deepcopy(row)

    def delete(self, resource: str, row_id: str) -> int:
        _check_resource(resource)
        row = self._find(resource, _parse_id(row_id))
        if row is None:
            return 0
        self._data[resource].remove(row)
        return 1

    # --- reports ------------------------------------------------------------

    def report(self, name: str, **params: Any) -> list[dict[str, Any]]:
        _check_report(name)
        params = query_params(params)
        with _as_api_error():
            window = resolve_window(params.get("range"), params.get("from"), params.get("to"), today=self._today)
            pg = page(params.get("limit"), params.get("offset"))
        txns = [t for t in self._data["transactions"] if _in_window(window, t["transaction_date"])]
        if name == "spending-by-category":
            return self._spending_by_category(txns)[pg.offset : pg.offset + pg.limit]
        fill_gaps = str(params.get("fill_gaps", "")).lower() in {"1", "true", "yes"}
        return self._income_vs_expense(txns, window, fill_gaps)

    def _spending_by_category(self, txns: list[dict[str, Any]]) -> list[dict[str, Any]]:
        totals: dict[str, float] = {}
        for c in self._data["categories"]:
            if c["type"] == "expense":
                totals.setdefault(c["name"], 0.0)
        names = {c["id"]: c["name"] for c in self._data["categories"] if c["type"] == "expense"}
        for t in txns:
            name = names.get(t.get("category_id"))
            if name is not None and t["direction"] == "outflow":
                totals[name] += abs(float(t["amount"]))
        rows = [{"categoryName": n, "total": money(v), "currency": "USD"} for n, v in totals.items()]
        rows.sort(key=lambda r: r["categoryName"])
        rows.sort(key=lambda r: r["total"], reverse=True)
        return rows

    def _income_vs_expense(self, txns: list[dict[str, Any]], window: DateWindow, fill_gaps: bool) -> list[dict[str, Any]]:
        buckets: dict[str, list[float]] = {}
        for t in txns:
            side = 0 if t["direction"] == "inflow" else 1
            buckets.setdefault(str(t["transaction_date"])[:7], [0.0, 0.0])[side] += abs(float(t["amount"]))
        keys = window.months() if (fill_gaps and window.bounded) else sorted(buckets)
        out = []
        for key in keys:
            income, expense = (money(v) for v in buckets.get(key, [0.0, 0.0]))
            out.append({"period": key, "income": income, "expense": expense, "net": money(income - expense)})
        return out

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from src.client.alerts import derive_alerts
from src.client.api import ApiClient, ApiError
from src.client.providers import DataProvider, FakeDataProvider, HttpDataProvider
from src.client.store import ResourceStore
from src.utils.money import format_money
from src.utils.time import year_month

log = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.filters["money"] = format_money

TOKEN_COOKIE = "auth_token"
RECENT_TRANSACTIONS = 5

ProviderFactory = Callable[[Optional[str]], DataProvider]


class LoginRequired(Exception):
    pass


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def mock_enabled(env: Optional[dict[str, str]] = None) -> bool:
    env = os.environ if env is None else env
    return _truthy(env.get("FINANCE_CLIENT_MOCK")) or not (env.get("FINANCE_API_URL") or "").strip()


def default_provider_factory(env: Optional[dict[str, str]] = None) -> ProviderFactory:
    """
    Mock mode shares one FakeDataProvider per app instance; otherwise every
    request gets an HTTP provider carrying the caller's token.
    """
    env = os.environ if env is None else env
    if mock_enabled(env):
        fake = FakeDataProvider()
        return lambda token: fake
    base_url = env["FINANCE_API_URL"].strip()
    return lambda token: HttpDataProvider(ApiClient(base_url=base_url, token=token))


def _parse_amount(value: str, field: str) -> float:
    try:
        return float((value or "").replace(",", "").strip())
    except ValueError as e:
        raise ValueError(f"{field} must be a number") from e


def _optional(value: str) -> Optional[str]:
    v = (value or "").strip()
    return v or None


def bar_pct(value: Any, top: Any) -> int:
    top_f = float(top or 0)
    if top_f <= 0:
        return 0
    return max(0, min(100, int(round(100.0 * float(value or 0) / top_f))))


templates.env.filters["bar_pct"] = bar_pct


def create_client_app(provider_factory: ProviderFactory | None = None) -> FastAPI:
    factory = provider_factory or default_provider_factory()
    app = FastAPI(title="Personal Finance Dashboard", version="0.1.0")
    app.state.provider_factory = factory

    def current_provider(request: Request) -> DataProvider:
        token = request.cookies.get(TOKEN_COOKIE)
        if not token:
            raise LoginRequired()
        return factory(token)

    def to_login() -> RedirectResponse:
        resp = RedirectResponse(url="/login", status_code=303)
        resp.delete_cookie(TOKEN_COOKIE)
        return resp

    @app.exception_handler(LoginRequired)
    async def _login_required(request: Request, exc: LoginRequired):
        return to_login()

    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError):
        if exc.status_code == 401:
            return to_login()
        log.warning("API error on %s: %s", request.url.path, exc)
        return templates.TemplateResponse(
            request,
            "error.html",
            {"message": exc.message},
            status_code=exc.status_code if exc.status_code >= 400 else 502,
        )

    def render(request: Request, name: str, context: dict[str, Any], status_code: int = 200):
        return templates.TemplateResponse(request, name, context, status_code=status_code)

    # --- auth ---------------------------------------------------------------

    @app.get("/login")
    def login_page(request: Request):
        return render(request, "login.html", {"error": None, "email": ""})

    @app.post("/login")
    def login_submit(request: Request, email: str = Form(default=""), password: str = Form(default="")):
        try:
            data = factory(None).login(email.strip(), password)
        except ApiError as e:
            status = 401 if e.status_code == 401 else 400
            return render(request, "login.html", {"error": e.message, "email": email}, status_code=status)
        resp = RedirectResponse(url="/", status_code=303)
        resp.set_cookie(TOKEN_COOKIE, str(data.get("token") or ""), httponly=True, samesite="lax")
        return resp

    @app.api_route("/logout", methods=["GET", "POST"])
    def logout():
        return to_login()

    # --- dashboard ----------------------------------------------------------

    @app.get("/")
    def dashboard(request: Request, provider: DataProvider = Depends(current_provider)):
        month_key = year_month(provider.today())
        spending = provider.report("spending-by-category", range="month")
        trend = provider.report("income-vs-expense", range="quarter", fill_gaps="true")
        categories = provider.list("categories")
        budgets = provider.list("budgets", month=month_key)
        recent = provider.list("transactions", limit=RECENT_TRANSACTIONS)

        current = next((r for r in trend if r["period"] == month_key), None) or {"income": 0.0, "expense": 0.0}
        income, expense = float(current["income"]), float(current["expense"])
        kpis = {
            "income": income,
            "expense": expense,
            "net": round(income - expense, 2),
            "savings_rate": round((income - expense) / income * 100.0, 2) if income > 0 else 0.0,
        }
        return render(
            request,
            "dashboard.html",
            {
                "month": month_key,
                "mock": provider.mock,
                "kpis": kpis,
                "spending": spending,
                "spending_max": max([r["total"] for r in spending] or [0]),
                "trend": trend,
                "trend_max": max([max(r["income"], r["expense"]) for r in trend] or [0]),
                "alerts": derive_alerts(budgets, categories),
                "recent": recent,
                "category_names": {c["id"]: c["name"] for c in categories},
            },
        )

    # --- resource pages -----------------------------------------------------

    def resource_page(
        request: Request,
        provider: DataProvider,
        resource: str,
        store: ResourceStore | None = None,
        error: str | None = None,
    ):
        if store is None:
            store = ResourceStore(provider, resource)
            if store.load().status_code == 401:
                return to_login()
        categories = provider.list("categories") if resource in {"transactions", "budgets"} else []
        accounts = provider.list("accounts") if resource == "transactions" else []
        return render(
            request,
            f"{resource}.html",
            {
                "items": store.items,
                "error": error or store.error,
                "mock": provider.mock,
                "categories": categories,
                "category_names": {c["id"]: c["name"] for c in categories},
                "accounts": accounts,
                "today": provider.today().isoformat(),
            },
            status_code=400 if (error or store.error) else 200,
        )

    def submit(request: Request, provider: DataProvider, resource: str, build: Callable[[], dict[str, Any]]):
        store = ResourceStore(provider, resource)
        if store.load().status_code == 401:
            return to_login()
        try:
            payload = build()
        except ValueError as e:
            return resource_page(request, provider, resource, store, error=str(e))
        result = store.add(payload)
        if result.status_code == 401:
            return to_login()
        if not result.ok:
            return resource_page(request, provider, resource, store)
        return RedirectResponse(url=f"/{resource}", status_code=303)

    def remove(request: Request, provider: DataProvider, resource: str, row_id: str):
        store = ResourceStore(provider, resource)
        if store.load().status_code == 401:
            return to_login()
        result = store.remove(row_id)
        if result.status_code == 401:
            return to_login()
        if not result.ok:
            return resource_page(request, provider, resource, store)
        return RedirectResponse(url=f"/{resource}", status_code=303)

    @app.get("/transactions")
    def transactions_page(request: Request, provider: DataProvider = Depends(current_provider)):
        return resource_page(request, provider, "transactions")

    @app.post("/transactions")
    def transactions_create(
        request: Request,
        provider: DataProvider = Depends(current_provider),
        amount: str = Form(default=""),
        direction: str = Form(default="outflow"),
        transaction_date: str = Form(default=""),
        description: str = Form(default=""),
        category_id: str = Form(default=""),
        account_id: str = Form(default=""),
    ):
        def build() -> dict[str, Any]:
            return {
                "amount": _parse_amount(amount, "Amount"),
                "direction": direction,
                "transaction_date": transaction_date.strip(),
                "description": _optional(description),
                "category_id": _optional(category_id),
                "account_id": _optional(account_id),
            }

        return submit(request, provider, "transactions", build)

    @app.post("/transactions/{row_id}/delete")
    def transactions_delete(request: Request, row_id: str, provider: DataProvider = Depends(current_provider)):
        return remove(request, provider, "transactions", row_id)

    @app.get("/budgets")
    def budgets_page(request: Request, provider: DataProvider = Depends(current_provider)):
        return resource_page(request, provider, "budgets")

    @app.post("/budgets")
    def budgets_create(
        request: Request,
        provider: DataProvider = Depends(current_provider),
        category_id: str = Form(default=""),
        month: str = Form(default=""),
        limit_amount: str = Form(default=""),
    ):
        def build() -> dict[str, Any]:
            return {
                "category_id": category_id.strip(),
                "month": month.strip(),
                "limit_amount": _parse_amount(limit_amount, "Limit"),
            }

        return submit(request, provider, "budgets", build)

    @app.post("/budgets/{row_id}/delete")
    def budgets_delete(request: Request, row_id: str, provider: DataProvider = Depends(current_provider)):
        return remove(request, provider, "budgets", row_id)

    @app.get("/goals")
    def goals_page(request: Request, provider: DataProvider = Depends(current_provider)):
        return resource_page(request, provider, "goals")

    @app.post("/goals")
    def goals_create(
        request: Request,
        provider: DataProvider = Depends(current_provider),
        name: str = Form(default=""),
        target_amount: str = Form(default=""),
        current_amount: str = Form(default="0"),
        target_date: str = Form(default=""),
    ):
        def build() -> dict[str, Any]:
            return {
                "name": name.strip(),
                "target_amount": _parse_amount(target_amount, "Target"),
                "current_amount": _parse_amount(current_amount or "0", "Current amount"),
                "target_date": _optional(target_date),
            }

        return submit(request, provider, "goals", build)

    @app.post("/goals/{row_id}/delete")
    def goals_delete(request: Request, row_id: str, provider: DataProvider = Depends(current_provider)):
        return remove(request, provider, "goals", row_id)

    return app

from __future__ import annotations

import logging
import time

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.app.auth import require_user
from src.app.errors import install_error_handlers
from src.app.routes.accounts import router as accounts_router
from src.app.routes.auth import router as auth_router
from src.app.routes.budgets import router as budgets_router
from src.app.routes.categories import router as categories_router
from src.app.routes.goals import router as goals_router
from src.app.routes.health import router as health_router
from src.app.routes.profile import router as profile_router
from src.app.routes.reports import router as reports_router
from src.app.routes.transactions import router as transactions_router
from src.db.init_db import init_db
from src.finance.config import Settings, load_settings


load_dotenv()

log = logging.getLogger("src.app.access")

PROTECTED_ROUTERS = (
    profile_router,
    accounts_router,
    transactions_router,
    budgets_router,
    goals_router,
    categories_router,
    reports_router,
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None, *, init_database: bool = True) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Personal Finance API", version="0.1.0")
    app.state.settings = settings

    origins = settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _access_log(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        log.info("%s %s -> %s (%.1fms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    install_error_handlers(app)

    if init_database:

        @app.on_event("startup")
        def _startup() -> None:
            init_db()

    app.include_router(health_router)
    app.include_router(auth_router)
    for router in PROTECTED_ROUTERS:
        app.include_router(router, dependencies=[Depends(require_user)])
    return app


app = create_app()

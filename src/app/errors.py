from __future__ import annotations

import logging
import traceback
from typing import Any, Iterable

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.app.db import app_settings
from src.finance.errors import FinanceError

log = logging.getLogger(__name__)

_LOC_SOURCES = {"body", "query", "path", "header", "cookie"}


def error_response(status_code: int, error: str, detail: Any = None, headers: dict[str, str] | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error}
    if detail is not None:
        content["detail"] = jsonable_encoder(detail)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def field_errors(errors: Iterable[dict[str, Any]]) -> list[dict[str, str]]:
    out: list[dict[str, str]] = []
    for e in errors:
        loc = [str(p) for p in (e.get("loc") or ()) if p not in _LOC_SOURCES]
        out.append({"field": ".".join(loc) or "body", "message": str(e.get("msg") or "invalid")})
    return out


async def _finance_error(request: Request, exc: FinanceError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return error_response(exc.status_code, exc.message, exc.detail, headers=headers)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = list(exc.errors())
    in_body = any((e.get("loc") or ("",))[0] == "body" for e in errors)
    return error_response(400, "Invalid body" if in_body else "Invalid query", field_errors(errors))


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Error"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    settings = app_settings(request)
    detail = None if settings.is_production else "".join(traceback.format_exception(exc))
    return error_response(500, "Internal Server Error", detail)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FinanceError, _finance_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unhandled_error)

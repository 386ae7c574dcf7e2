from __future__ import annotations

from typing import Any, Optional


class FinanceError(Exception):
    """
    Base for failures the API maps to a specific HTTP status.

    Every subclass renders as the JSON envelope `{"error": message, "detail": ...}`.
    """

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, *, detail: Any = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class BadRequest(FinanceError):
    status_code = 400
    default_message = "Bad Request"


class ValidationError(BadRequest):
    default_message = "Invalid input"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(detail=[{"field": field, "message": message}])


class Unauthorized(FinanceError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(FinanceError):
    status_code = 404
    default_message = "Not found"


class Conflict(FinanceError):
    status_code = 409
    default_message = "Conflict"


class InternalError(FinanceError):
    status_code = 500
    default_message = "Internal Server Error"

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from src.client.api import ApiError
from src.client.providers import DataProvider

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreResult:
    ok: bool
    error: Optional[str] = None
    status_code: Optional[int] = None


class ResourceStore:
    """
    Client-side list state for one resource with optimistic add/remove.

    `add` shows a placeholder row (id `tmp_<resource>_<n>`) until the server
    answers; `remove` drops the row first and restores the previous list if the
    server refuses.
    """

    def __init__(self, provider: DataProvider, resource: str):
        self.provider = provider
        self.resource = resource
        self.items: list[dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None
        self.is_submitting = False
        self._params: dict[str, Any] = {}
        self._tmp_seq = 0

    def load(self, **params: Any) -> StoreResult:
        self._params = dict(params)
        self.loading = True
        self.error = None
        try:
            self.items = list(self.provider.list(self.resource, **params))
        except ApiError as e:
            self.error = e.message
            return StoreResult(ok=False, error=e.message, status_code=e.status_code)
        finally:
            self.loading = False
        return StoreResult(ok=True)

    def refresh(self) -> StoreResult:
        return self.load(**self._params)

    def _placeholder_id(self) -> str:
        self._tmp_seq += 1
        return f"tmp_{self.resource}_{self._tmp_seq}"

    def add(self, payload: dict[str, Any]) -> StoreResult:
        tmp_id = self._placeholder_id()
        self.items.insert(0, {**payload, "id": tmp_id, "pending": True})
        self.is_submitting = True
        self.error = None
        try:
            created = self.provider.create(self.resource, payload)
        except ApiError as e:
            self.items = [i for i in self.items if i.get("id") != tmp_id]
            self.error = e.message
            log.info("Create %s failed: %s", self.resource, e)
            return StoreResult(ok=False, error=e.message, status_code=e.status_code)
        finally:
            self.is_submitting = False
        self.items = [created if i.get("id") == tmp_id else i for i in self.items]
        return StoreResult(ok=True)

    def remove(self, row_id: str) -> StoreResult:
        previous = list(self.items)
        self.items = [i for i in self.items if i.get("id") != row_id]
        self.is_submitting = True
        self.error = None
        try:
            deleted = self.provider.delete(self.resource, row_id)
        except ApiError as e:
            self.items = previous
            self.error = e.message
            return StoreResult(ok=False, error=e.message, status_code=e.status_code)
        finally:
            self.is_submitting = False
        if deleted == 0:
            self.items = previous
            self.error = "Nothing deleted"
            return StoreResult(ok=False, error=self.error)
        return StoreResult(ok=True)

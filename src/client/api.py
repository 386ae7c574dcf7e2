from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, Optional

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 15.0


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    content: bytes
    headers: dict[str, str]


Transport = Callable[[str, str, dict[str, str], Optional[bytes], float], HttpResponse]


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.status_code = int(status_code)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"


def _default_transport(url: str, method: str, headers: dict[str, str], body: bytes | None, timeout_s: float) -> HttpResponse:
    req = urllib.request.Request(url, data=body, method=method)
    for k, v in (headers or {}).items():
        if k and v is not None:
            req.add_header(str(k), str(v))
    try:
        with urllib.request.urlopen(req, timeout=timeout_s) as resp:
            status = int(getattr(resp, "status", 200))
            hdrs = {str(k): str(v) for k, v in dict(resp.headers).items()}
            return HttpResponse(status_code=status, content=resp.read(), headers=hdrs)
    except urllib.error.HTTPError as e:
        # HTTP errors come back as responses so the caller can read the error envelope.
        hdrs = {str(k): str(v) for k, v in dict(e.headers or {}).items()}
        return HttpResponse(status_code=int(e.code or 0), content=e.read() or b"", headers=hdrs)
    except urllib.error.URLError as e:
        raise ApiError(0, f"Network error: {e.reason}") from e


class ApiClient:
    """
    JSON client for the finance API.

    Holds the bearer token between calls; a 401 from any endpoint clears it so
    the caller falls back to the login flow.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: Transport | None = None,
    ):
        self.base_url = (base_url or "").strip().rstrip("/")
        if not self.base_url:
            raise ValueError("API base URL is required.")
        self.token = token or None
        self.timeout_s = float(timeout_s)
        self._transport = transport or _default_transport

    def _url(self, path: str, params: dict[str, Any] | None = None) -> str:
        p = (path or "").strip()
        if not p.startswith("/"):
            p = "/" + p
        url = self.base_url + p
        if params:
            q = urllib.parse.urlencode({k: v for k, v in params.items() if v is not None and v != ""})
            if q:
                url = url + ("&" if "?" in url else "?") + q
        return url

    def _headers(self, has_body: bool) -> dict[str, str]:
        h = {"Accept": "application/json"}
        if has_body:
            h["Content-Type"] = "application/json"
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> Any:
        url = self._url(path, params=params)
        body = json.dumps(json_body).encode("utf-8") if json_body is not None else None
        resp = self._transport(url, method.upper(), self._headers(body is not None), body, self.timeout_s)
        status = int(resp.status_code or 0)
        try:
            data = json.loads(resp.content.decode("utf-8")) if resp.content else None
        except ValueError:
            data = None

        if status == 401:
            self.token = None
        if status < 200 or status >= 300:
            message = data.get("error") if isinstance(data, dict) else None
            detail = data.get("detail") if isinstance(data, dict) else None
            # Path only: query strings can carry ids.
            log.info("%s %s failed with %s", method.upper(), urllib.parse.urlparse(url).path, status)
            raise ApiError(status, str(message or f"HTTP {status}"), detail)
        return data

    def get(self, path: str, **params: Any) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, body: Any) -> Any:
        return self.request("POST", path, json_body=body)

    def put(self, path: str, body: Any) -> Any:
        return self.request("PUT", path, json_body=body)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def login(self, email: str, password: str) -> dict[str, Any]:
        data = self.post("/auth/login", {"email": email, "password": password})
        self.token = data.get("token") if isinstance(data, dict) else None
        return data

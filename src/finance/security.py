from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Any

import bcrypt
from jose import JWTError, jwt

from src.finance.config import Settings
from src.finance.errors import InternalError, Unauthorized
from src.utils.time import utcnow


_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


@dataclass(frozen=True)
class TokenIdentity:
    id: str
    email: str


def hash_password(password: str, *, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def parse_duration(value: str) -> dt.timedelta:
    """
    "1h" / "30m" / "45s" / "2d" / "3600" -> timedelta.
    """
    m = _DURATION_RE.match(str(value or ""))
    if not m:
        raise ValueError(f"Invalid duration: {value!r}")
    seconds = int(m.group(1)) * _UNIT_SECONDS[m.group(2).lower()]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return dt.timedelta(seconds=seconds)


def _secret(settings: Settings) -> str:
    if not settings.jwt_secret:
        raise InternalError("Server configuration error")
    return settings.jwt_secret


def issue_token(settings: Settings, *, user_id: str, email: str, now: dt.datetime | None = None) -> str:
    issued = now or utcnow()
    claims: dict[str, Any] = {
        "sub": user_id,
        "id": user_id,
        "email": email,
        "iat": int(issued.timestamp()),
        "exp": int((issued + parse_duration(settings.jwt_expires_in)).timestamp()),
    }
    return jwt.encode(claims, _secret(settings), algorithm=settings.jwt_algorithm)


def verify_token(settings: Settings, token: str | None) -> TokenIdentity:
    secret = _secret(settings)
    if not token:
        raise Unauthorized()
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise Unauthorized() from e
    user_id = payload.get("id") or payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise Unauthorized()
    return TokenIdentity(id=str(user_id), email=str(email))

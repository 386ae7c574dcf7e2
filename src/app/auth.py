from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.app.db import app_settings
from src.finance.config import Settings
from src.finance.errors import Unauthorized
from src.finance.security import TokenIdentity, verify_token


security = HTTPBearer(auto_error=False)


def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(app_settings),
) -> TokenIdentity:
    """
    Resolve `Authorization: Bearer <token>` to the caller's identity.

    Missing header, wrong scheme, bad signature and expiry all surface as 401.
    """
    if credentials is None or (credentials.scheme or "").lower() != "bearer":
        raise Unauthorized()
    return verify_token(settings, credentials.credentials)

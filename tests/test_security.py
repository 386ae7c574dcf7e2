from __future__ import annotations

import datetime as dt

import pytest
from jose import jwt

from src.finance.config import Settings
from src.finance.errors import InternalError, Unauthorized
from src.finance.security import hash_password, issue_token, parse_duration, verify_password, verify_token


def _settings(**kw) -> Settings:
    base = {"jwt_secret": "s3cret", "bcrypt_rounds": 4}
    base.update(kw)
    return Settings(**base)


def test_password_hash_roundtrip_and_mismatch() -> None:
    h = hash_password("hunter22!", rounds=4)
    assert h != "hunter22!"
    assert verify_password("hunter22!", h)
    assert not verify_password("hunter23!", h)
    assert not verify_password("hunter22!", "not-a-bcrypt-hash")


@pytest.mark.parametrize(
    "raw,seconds",
    [("1h", 3600), ("30m", 1800), ("45s", 45), ("2d", 172800), ("3600", 3600), (" 5M ", 300)],
)
def test_parse_duration(raw: str, seconds: int) -> None:
    assert parse_duration(raw) == dt.timedelta(seconds=seconds)


@pytest.mark.parametrize("raw", ["", "0", "1w", "-5m", "abc"])
def test_parse_duration_rejects_garbage(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_duration(raw)


def test_token_claims_and_verify() -> None:
    settings = _settings(jwt_expires_in="30m")
    now = dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)
    token = issue_token(settings, user_id="u-1", email="a@example.com", now=now)
    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == claims["id"] == "u-1"
    assert claims["email"] == "a@example.com"
    assert claims["exp"] - claims["iat"] == 1800

    fresh = issue_token(settings, user_id="u-1", email="a@example.com")
    ident = verify_token(settings, fresh)
    assert (ident.id, ident.email) == ("u-1", "a@example.com")


def test_expired_or_foreign_tokens_are_unauthorized() -> None:
    settings = _settings()
    old = issue_token(settings, user_id="u-1", email="a@example.com", now=dt.datetime(2020, 1, 1, tzinfo=dt.timezone.utc))
    with pytest.raises(Unauthorized):
        verify_token(settings, old)

    other = issue_token(_settings(jwt_secret="other"), user_id="u-1", email="a@example.com")
    with pytest.raises(Unauthorized):
        verify_token(settings, other)

    with pytest.raises(Unauthorized):
        verify_token(settings, None)


def test_missing_secret_is_a_server_error() -> None:
    settings = _settings(jwt_secret="  ")
    assert settings.jwt_secret is None
    with pytest.raises(InternalError, match="Server configuration error"):
        issue_token(settings, user_id="u-1", email="a@example.com")
    with pytest.raises(InternalError):
        verify_token(settings, "anything")

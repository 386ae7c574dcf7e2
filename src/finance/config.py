from __future__ import annotations

import os
import urllib.parse
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


DEFAULT_DATABASE_URL = "sqlite:///./data/finance.db"


class Settings(BaseModel):
    database_url: str = DEFAULT_DATABASE_URL
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_expires_in: str = "1h"
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    cors_origin: str = "*"
    port: int = 8080
    environment: str = "development"
    log_level: str = "INFO"
    default_currency: str = "USD"
    timezone: str = "UTC"

    @field_validator("jwt_secret", mode="before")
    @classmethod
    def _blank_secret_to_none(cls, v):
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @field_validator("default_currency")
    @classmethod
    def _upper_currency(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origin.split(",") if o.strip()] or ["*"]


# Env var -> Settings field. DATABASE_URL is handled separately (discrete PG* fallback).
_ENV_FIELDS = {
    "JWT_SECRET": "jwt_secret",
    "JWT_EXPIRES_IN": "jwt_expires_in",
    "BCRYPT_ROUNDS": "bcrypt_rounds",
    "CORS_ORIGIN": "cors_origin",
    "PORT": "port",
    "APP_ENV": "environment",
    "LOG_LEVEL": "log_level",
    "DEFAULT_CURRENCY": "default_currency",
    "APP_TIMEZONE": "timezone",
}


def database_url_from_env(env: Optional[dict[str, str]] = None) -> Optional[str]:
    """
    DATABASE_URL wins; otherwise discrete PGHOST/PGUSER/PGPASSWORD/PGDATABASE/PGPORT
    build a PostgreSQL URL. Returns None when neither is configured.
    """
    e = os.environ if env is None else env
    url = (e.get("DATABASE_URL") or "").strip()
    if url:
        return url
    if not any((e.get(k) or "").strip() for k in ("PGHOST", "PGUSER", "PGDATABASE")):
        return None
    host = (e.get("PGHOST") or "localhost").strip()
    user = urllib.parse.quote((e.get("PGUSER") or "postgres").strip(), safe="")
    password = urllib.parse.quote(e.get("PGPASSWORD") or "", safe="")
    database = (e.get("PGDATABASE") or "finance").strip()
    port = (e.get("PGPORT") or "5432").strip()
    auth = f"{user}:{password}" if password else user
    return f"postgresql+psycopg://{auth}@{host}:{port}/{database}"


def _candidate_paths() -> list[Path]:
    explicit = (os.environ.get("FINANCE_CONFIG") or "").strip()
    if explicit:
        return [Path(os.path.expanduser(explicit))]
    return [Path("finance.yaml")]


def _load_yaml() -> dict[str, Any]:
    for p in _candidate_paths():
        if p.exists():
            data = yaml.safe_load(p.read_text()) or {}
            return dict(data.get("finance") or data)
    return {}


def load_settings() -> Settings:
    data = _load_yaml()
    for env_name, field in _ENV_FIELDS.items():
        raw = os.environ.get(env_name)
        if raw is not None and raw.strip() != "":
            data[field] = raw.strip()
    url = database_url_from_env()
    if url:
        data["database_url"] = url
    return Settings.model_validate(data)

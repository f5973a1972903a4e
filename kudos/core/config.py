"""Application settings and environment helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)


def _require_env(name: str) -> str:
    """Return a required environment variable or raise an error."""

    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


# Discord OAuth configuration ------------------------------------------------
DISCORD_CLIENT_ID = os.getenv("DISCORD_CLIENT_ID") or ""
DISCORD_CLIENT_SECRET = os.getenv("DISCORD_CLIENT_SECRET") or ""
OAUTH_REDIRECT_URL = os.getenv(
    "OAUTH_REDIRECT_URL", "http://127.0.0.1:3000/auth/discord/callback"
)


# Application security -------------------------------------------------------
SECRET_KEY = _require_env("SECRET_KEY")

# FRONTEND_ORIGIN can contain a comma-separated list for multi-domain deploys.
_frontend_origins = _split_csv(os.getenv("FRONTEND_ORIGIN", "http://localhost:5173"))
_additional_origins = _split_csv(os.getenv("ADDITIONAL_ALLOWED_ORIGINS"))

_local_dev_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

ALLOWED_CORS_ORIGINS = _unique(
    [
        *_frontend_origins,
        *_additional_origins,
        *_local_dev_origins,
    ]
)

FRONTEND_ORIGINS = _frontend_origins
FRONTEND_ORIGIN = FRONTEND_ORIGINS[0] if FRONTEND_ORIGINS else ""

COOKIE_DOMAIN = os.getenv("COOKIE_DOMAIN") or None
COOKIE_SECURE = _env_bool("COOKIE_SECURE", False)
COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "lax")

# Signs every request in as a fixed user; never enable outside local testing.
AUTH_TEST_MODE = _env_bool("AUTH_TEST_MODE", False)
AUTH_TEST_USER = os.getenv("AUTH_TEST_USER") or None


# Runtime behaviour ----------------------------------------------------------
_DATA_DIR = Path(os.getenv("DATA_DIR", "data"))
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{_DATA_DIR / 'app.db'}"
DB_RESET = _env_bool("DB_RESET", False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE") or None


__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "AUTH_TEST_MODE",
    "AUTH_TEST_USER",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATABASE_URL",
    "DB_RESET",
    "DISCORD_CLIENT_ID",
    "DISCORD_CLIENT_SECRET",
    "FRONTEND_ORIGIN",
    "FRONTEND_ORIGINS",
    "LOG_FILE",
    "LOG_LEVEL",
    "OAUTH_REDIRECT_URL",
    "SECRET_KEY",
]

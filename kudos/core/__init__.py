"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    AUTH_TEST_MODE,
    AUTH_TEST_USER,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DATABASE_URL,
    DB_RESET,
    DISCORD_CLIENT_ID,
    DISCORD_CLIENT_SECRET,
    FRONTEND_ORIGIN,
    FRONTEND_ORIGINS,
    OAUTH_REDIRECT_URL,
    SECRET_KEY,
)
from .database import engine, get_session
from .log import LOGGER
from .time import isoformat_utc, utcnow

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
    "LOGGER",
    "OAUTH_REDIRECT_URL",
    "SECRET_KEY",
    "engine",
    "get_session",
    "isoformat_utc",
    "utcnow",
]

"""Core configuration and infrastructure helpers."""

from .config import (
    AFTER_SIGN_IN_PATH,
    ALLOWED_CORS_ORIGINS,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DB_RESET,
    FRONTEND_ORIGIN,
    FRONTEND_ORIGINS,
    LOG_LEVEL,
    SECRET_KEY,
)
from .database import engine, get_session
from .logging import configure_logging
from .messages import humanize, t
from .time import utcnow

__all__ = [
    "AFTER_SIGN_IN_PATH",
    "ALLOWED_CORS_ORIGINS",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DB_RESET",
    "FRONTEND_ORIGIN",
    "FRONTEND_ORIGINS",
    "LOG_LEVEL",
    "SECRET_KEY",
    "configure_logging",
    "engine",
    "get_session",
    "humanize",
    "t",
    "utcnow",
]

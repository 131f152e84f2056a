"""Settings read once from the environment (and an optional ``.env``).

Every value is a module constant; import what you need from here or from
``taskforge.core``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

load_dotenv(override=False)

TRUTHY = frozenset({"1", "true", "yes", "on"})

LOCAL_DEV_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)
DEV_SECRET_KEY = "dev-insecure-secret-key"


def env_flag(name: str, default: bool, environ: Mapping[str, str] = os.environ) -> bool:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY


def env_list(raw: Optional[str]) -> List[str]:
    """Comma-separated values, blanks dropped."""

    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def resolve_secret_key(env: str, environ: Mapping[str, str] = os.environ) -> str:
    """Session signing key. Production refuses to start without one."""

    value = environ.get("SECRET_KEY")
    if value:
        return value
    if env == "prod":
        raise RuntimeError("SECRET_KEY must be set when ENV=prod")
    return DEV_SECRET_KEY


def cors_origins(frontend: List[str], additional: List[str], *, env: str) -> List[str]:
    """Origins allowed to send credentialed requests, first occurrence wins."""

    candidates = [*frontend, *additional]
    if env != "prod":
        candidates.extend(LOCAL_DEV_ORIGINS)
    return list(dict.fromkeys(candidates))


ENV = os.getenv("ENV", "dev").strip().lower()


# Sessions and CORS -----------------------------------------------------------
SECRET_KEY = resolve_secret_key(ENV)

# The first FRONTEND_ORIGIN entry is where logins land; the rest only widen CORS.
FRONTEND_ORIGINS = env_list(os.getenv("FRONTEND_ORIGIN", "http://localhost:5173"))
FRONTEND_ORIGIN = FRONTEND_ORIGINS[0] if FRONTEND_ORIGINS else ""
ALLOWED_CORS_ORIGINS = cors_origins(
    FRONTEND_ORIGINS, env_list(os.getenv("ADDITIONAL_ALLOWED_ORIGINS")), env=ENV
)
AFTER_SIGN_IN_PATH = os.getenv("AFTER_SIGN_IN_PATH", "/")


# OAuth providers -------------------------------------------------------------
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
GITHUB_CLIENT_ID = os.getenv("GITHUB_CLIENT_ID", "")
GITHUB_CLIENT_SECRET = os.getenv("GITHUB_CLIENT_SECRET", "")

# Callback URLs are built as f"{OAUTH_REDIRECT_BASE}/auth/{provider}/callback".
OAUTH_REDIRECT_BASE = os.getenv("OAUTH_REDIRECT_BASE", "http://127.0.0.1:3000").rstrip("/")


# Runtime behaviour ----------------------------------------------------------
DATABASE_URL = os.getenv("DATABASE_URL", "")
DATA_DIR = Path(os.getenv("DATA_DIR", "data"))
DB_RESET = env_flag("DB_RESET", False)

COOKIE_DOMAIN = os.getenv("COOKIE_DOMAIN") or None
COOKIE_SECURE = env_flag("COOKIE_SECURE", ENV == "prod")
COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "lax")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()


__all__ = [
    "AFTER_SIGN_IN_PATH",
    "ALLOWED_CORS_ORIGINS",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATABASE_URL",
    "DATA_DIR",
    "DB_RESET",
    "ENV",
    "FRONTEND_ORIGIN",
    "FRONTEND_ORIGINS",
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "LOG_LEVEL",
    "OAUTH_REDIRECT_BASE",
    "SECRET_KEY",
    "cors_origins",
    "env_flag",
    "env_list",
    "resolve_secret_key",
]

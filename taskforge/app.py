"""ASGI entry point: ``create_app`` wires sessions, CORS and the account routes."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel
from starlette.middleware.sessions import SessionMiddleware

from . import models  # noqa: F401 - registers tables on SQLModel.metadata
from .api import register_routes
from .core import (
    ALLOWED_CORS_ORIGINS,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DB_RESET,
    LOG_LEVEL,
    SECRET_KEY,
    configure_logging,
    engine,
)

logger = logging.getLogger(__name__)

SESSION_COOKIE = "sid"


def schema_lifespan(bind: Engine, *, reset: bool):
    """Create the account tables on startup, dropping them first when ``reset``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if reset:
            logger.warning("DB_RESET is set; dropping all tables on %s", bind.url)
            SQLModel.metadata.drop_all(bind)
        SQLModel.metadata.create_all(bind)
        yield

    return lifespan


def create_app(
    *,
    secret_key: str = SECRET_KEY,
    cors_origins: Optional[Sequence[str]] = None,
    reset_db: bool = DB_RESET,
    bind: Engine = engine,
) -> FastAPI:
    configure_logging(LOG_LEVEL)

    app = FastAPI(
        title="Taskforge Accounts API",
        version="0.1.0",
        lifespan=schema_lifespan(bind, reset=reset_db),
    )

    # Only GET/POST/DELETE routes exist; credentials ride on the session cookie.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(ALLOWED_CORS_ORIGINS if cors_origins is None else cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=secret_key,
        session_cookie=SESSION_COOKIE,
        https_only=COOKIE_SECURE,
        same_site=COOKIE_SAMESITE,
        domain=COOKIE_DOMAIN,
    )

    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("taskforge.app:app", host="127.0.0.1", port=3000, reload=True)

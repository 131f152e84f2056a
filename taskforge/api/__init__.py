"""HTTP surface of the accounts service."""

from __future__ import annotations

from typing import Iterable

from fastapi import APIRouter, FastAPI

from .routers import ALL_ROUTERS


def register_routes(app: FastAPI, routers: Iterable[APIRouter] = ALL_ROUTERS) -> None:
    """Mount ``routers`` (every account router by default) on ``app``."""

    for router in routers:
        app.include_router(router)


__all__ = ["register_routes"]

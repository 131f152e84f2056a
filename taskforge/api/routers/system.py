"""System-level API endpoints."""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from ...core import get_session
from ...services.accounts import account_to_dict
from ...services.flash import pop_flashes
from ...services.sessions import current_account

router = APIRouter(tags=["system"])


@router.get("/")
def home(request: Request, session: Session = Depends(get_session)):
    """Landing payload: signed-in account and pending flash messages."""

    account = current_account(request, session)
    return {
        "user": account_to_dict(account) if account else None,
        "flash": pop_flashes(request),
    }


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness probe."""

    return {"ok": True}


__all__ = ["router"]

"""Authenticated session lifecycle and sign-in tracking."""

from __future__ import annotations

import logging
from typing import Optional

from sqlmodel import Session
from starlette.requests import Request

from ..core.time import utcnow
from ..models import Account

logger = logging.getLogger(__name__)

SESSION_KEYS = ("uid", "name", "email")


def _remote_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def sign_in(request: Request, session: Session, account: Account) -> None:
    """Bind ``account`` to the request session and record the sign in."""

    now = utcnow()
    ip = _remote_ip(request)

    account.last_sign_in_at = account.current_sign_in_at or now
    account.last_sign_in_ip = account.current_sign_in_ip or ip
    account.current_sign_in_at = now
    account.current_sign_in_ip = ip
    account.sign_in_count = (account.sign_in_count or 0) + 1
    session.add(account)
    session.commit()
    session.refresh(account)

    request.session["uid"] = str(account.id)
    request.session["name"] = account.name or account.email
    request.session["email"] = account.email
    logger.info("Signed in account id=%s count=%s", account.id, account.sign_in_count)


def sign_out(request: Request) -> None:
    uid = request.session.get("uid")
    for key in SESSION_KEYS:
        request.session.pop(key, None)
    if uid:
        logger.info("Signed out account id=%s", uid)


def current_account(request: Request, session: Session) -> Optional[Account]:
    uid = request.session.get("uid")
    if not uid:
        return None
    try:
        account = session.get(Account, int(uid))
    except (TypeError, ValueError):
        account = None
    if account is None:
        sign_out(request)
    return account


__all__ = ["SESSION_KEYS", "current_account", "sign_in", "sign_out"]

"""Email confirmation state of accounts.

An account is confirmed once ``confirmed_at`` is set. Accounts created from a
provider that vouches for the email skip the step; every other account carries
a one-time ``confirmation_token`` until confirmed. Delivering the token to the
user is left to the mail layer.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlmodel import Session, select

from ..core.time import utcnow
from ..models import Account
from .credentials import friendly_token

logger = logging.getLogger(__name__)


def is_confirmed(account: Account) -> bool:
    return account.confirmed_at is not None


def active_for_authentication(account: Account) -> bool:
    """Whether the account may hold a password-based session."""

    return is_confirmed(account)


def skip_confirmation(account: Account) -> None:
    """Mark an unsaved or saved account confirmed without a token round trip."""

    account.confirmed_at = utcnow()
    account.confirmation_token = None


def generate_confirmation_token(account: Account) -> str:
    token = friendly_token()
    account.confirmation_token = token
    account.confirmation_sent_at = utcnow()
    return token


def confirm(account: Account) -> None:
    account.confirmed_at = utcnow()
    account.confirmation_token = None
    account.updated_at = utcnow()


def confirm_by_token(session: Session, token: str) -> Optional[Account]:
    """Confirm the account owning ``token``; ``None`` when no account matches."""

    if not token:
        return None
    account = session.exec(
        select(Account).where(Account.confirmation_token == token)
    ).first()
    if account is None:
        return None

    confirm(account)
    session.add(account)
    session.commit()
    session.refresh(account)
    logger.info("Confirmed account id=%s", account.id)
    return account


__all__ = [
    "active_for_authentication",
    "confirm",
    "confirm_by_token",
    "generate_confirmation_token",
    "is_confirmed",
    "skip_confirmation",
]

"""Password credentials: generation, hashing and verification."""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from passlib.context import CryptContext
from sqlmodel import Session, func, select

from ..models import Account

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def friendly_token(length: int = 20) -> str:
    """Random URL-safe token of exactly ``length`` characters."""

    return secrets.token_urlsafe(length)[:length]


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Unrecognised or malformed hash.
        return False


def authenticate(session: Session, email: str, password: str) -> Optional[Account]:
    """Return the account matching ``email`` when ``password`` is correct."""

    normalized = (email or "").strip().lower()
    if not normalized:
        return None
    account = session.exec(
        select(Account).where(func.lower(Account.email) == normalized)
    ).first()
    if account is None or not verify_password(password, account.password_hash):
        logger.info("Password sign in rejected for email=%s", normalized)
        return None
    return account


__all__ = ["authenticate", "friendly_token", "hash_password", "pwd_context", "verify_password"]

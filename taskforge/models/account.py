"""Database model for local user accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow

NAME_MAX_LENGTH = 100


class Account(SQLModel, table=True):
    """Local user, reachable by password or by a linked OAuth identity."""

    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("provider", "uid", name="uq_accounts_provider_uid"),)

    id: Optional[int] = ORMField(default=None, primary_key=True)
    email: str = ORMField(index=True, unique=True, max_length=255)
    name: str = ORMField(max_length=NAME_MAX_LENGTH)
    password_hash: str

    # OAuth identity; both set or both null.
    provider: Optional[str] = ORMField(default=None, index=True)
    uid: Optional[str] = ORMField(default=None)
    avatar: Optional[str] = None

    confirmed_at: Optional[datetime] = None
    confirmation_token: Optional[str] = ORMField(default=None, unique=True)
    confirmation_sent_at: Optional[datetime] = None

    sign_in_count: int = 0
    current_sign_in_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None
    current_sign_in_ip: Optional[str] = None
    last_sign_in_ip: Optional[str] = None

    created_at: datetime = ORMField(default_factory=utcnow)
    updated_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Account", "NAME_MAX_LENGTH"]

"""Database models for organizations and their members."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


class Organization(SQLModel, table=True):
    """Workspace that groups projects and their members."""

    __tablename__ = "organizations"

    id: Optional[int] = ORMField(default=None, primary_key=True)
    name: str
    created_at: datetime = ORMField(default_factory=utcnow)


class OrganizationMembership(SQLModel, table=True):
    """Links an account to an organization with a role."""

    __tablename__ = "organization_memberships"
    __table_args__ = (
        UniqueConstraint("account_id", "organization_id", name="uq_membership_account_org"),
    )

    id: Optional[int] = ORMField(default=None, primary_key=True)
    account_id: int = ORMField(foreign_key="accounts.id", index=True)
    organization_id: int = ORMField(foreign_key="organizations.id", index=True)
    role: str = ORMField(default=ROLE_MEMBER)
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["Organization", "OrganizationMembership", "ROLE_ADMIN", "ROLE_MEMBER"]

"""Organization-level authorization checks."""

from __future__ import annotations

from sqlmodel import Session, select

from ..models import ROLE_ADMIN, Account, Organization, OrganizationMembership


def admin_of(session: Session, account: Account, organization: Organization) -> bool:
    """True when ``account`` holds the admin role in ``organization``."""

    membership = session.exec(
        select(OrganizationMembership).where(
            OrganizationMembership.account_id == account.id,
            OrganizationMembership.organization_id == organization.id,
            OrganizationMembership.role == ROLE_ADMIN,
        )
    ).first()
    return membership is not None


def member_of(session: Session, account: Account, organization: Organization) -> bool:
    """True when ``account`` belongs to ``organization`` in any role."""

    membership = session.exec(
        select(OrganizationMembership).where(
            OrganizationMembership.account_id == account.id,
            OrganizationMembership.organization_id == organization.id,
        )
    ).first()
    return membership is not None


__all__ = ["admin_of", "member_of"]

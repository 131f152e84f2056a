"""Database model exports."""

from .account import NAME_MAX_LENGTH, Account
from .organization import ROLE_ADMIN, ROLE_MEMBER, Organization, OrganizationMembership

__all__ = [
    "Account",
    "NAME_MAX_LENGTH",
    "Organization",
    "OrganizationMembership",
    "ROLE_ADMIN",
    "ROLE_MEMBER",
]

"""Service layer helpers."""

from .accounts import Reconciliation, delete_account, from_oauth, register_account
from .authorization import admin_of, member_of

__all__ = [
    "Reconciliation",
    "admin_of",
    "delete_account",
    "from_oauth",
    "member_of",
    "register_account",
]

"""Account validation and reconciliation of provider identities.

``from_oauth`` maps an identity-provider payload onto a local account:

1. reject payloads without provider, uid or a well-formed email (``None``);
2. return the account already linked to ``(provider, uid)`` untouched;
3. otherwise build a new account, confirmed up front only when the provider
   vouches for the email, validate it and persist it.

A concurrent login that wins the insert race surfaces here as an
``IntegrityError``; the lookup is retried once before giving up.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from ..models import NAME_MAX_LENGTH, Account, OrganizationMembership
from ..schemas.auth import AuthPayload
from .confirmation import generate_confirmation_token, skip_confirmation
from .credentials import friendly_token, hash_password

logger = logging.getLogger(__name__)

# WHATWG "valid email address" production.
EMAIL_REGEXP = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)

GOOGLE_PROVIDERS = frozenset({"google", "google_oauth2"})
GITHUB_PROVIDERS = frozenset({"github"})


@dataclass
class Reconciliation:
    """Outcome of mapping a payload onto an account.

    ``errors`` is non-empty when the candidate account failed validation and
    was not saved.
    """

    account: Account
    created: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def persisted(self) -> bool:
        return not self.errors and self.account.id is not None


def valid_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_REGEXP.fullmatch(email) is not None


def resolve_display_name(name: Optional[str], email: str) -> str:
    """Claimed name, or the local part of ``email`` when the claim is blank."""

    claimed = (name or "").strip()
    if claimed:
        return claimed
    return email.split("@", 1)[0].strip()


def find_by_email(session: Session, email: str) -> Optional[Account]:
    normalized = (email or "").strip().lower()
    return session.exec(
        select(Account).where(func.lower(Account.email) == normalized)
    ).first()


def find_by_identity(session: Session, provider: str, uid: str) -> Optional[Account]:
    return session.exec(
        select(Account).where(Account.provider == provider, Account.uid == uid)
    ).first()


def validate_account(session: Session, account: Account) -> List[str]:
    """Full validation messages for ``account``; empty when it may be saved."""

    errors: List[str] = []

    name = (account.name or "").strip()
    if not name:
        errors.append("Name can't be blank")
    elif len(name) > NAME_MAX_LENGTH:
        errors.append(f"Name is too long (maximum is {NAME_MAX_LENGTH} characters)")

    email = (account.email or "").strip()
    if not email:
        errors.append("Email can't be blank")
    elif not valid_email(email):
        errors.append("Email is invalid")
    else:
        other = find_by_email(session, email)
        if other is not None and other.id != account.id:
            errors.append("Email has already been taken")

    if not account.password_hash:
        errors.append("Password can't be blank")

    return errors


def email_verified_by_provider(payload: AuthPayload) -> bool:
    provider = (payload.provider or "").strip()

    if provider in GOOGLE_PROVIDERS:
        raw_info = payload.extra.get("raw_info") or {}
        flag = raw_info.get("email_verified") if isinstance(raw_info, Mapping) else None
        return flag is True or (isinstance(flag, str) and flag.strip().lower() == "true")
    if provider in GITHUB_PROVIDERS:
        # GitHub only reports an address once it is verified.
        return bool((payload.info.email or "").strip())
    return False


def _coerce_payload(payload: Union[AuthPayload, Mapping[str, Any], None]) -> Optional[AuthPayload]:
    if payload is None or isinstance(payload, AuthPayload):
        return payload
    try:
        return AuthPayload.model_validate(payload)
    except ValidationError:
        return None


def from_oauth(
    session: Session, payload: Union[AuthPayload, Mapping[str, Any], None]
) -> Optional[Reconciliation]:
    """Find or provision the account for a provider identity.

    Returns ``None`` when the payload cannot identify an account.
    """

    auth = _coerce_payload(payload)
    if auth is None:
        logger.info("OAuth payload rejected: missing or malformed payload")
        return None

    provider = (auth.provider or "").strip()
    uid = (auth.uid or "").strip()
    if not provider or not uid:
        logger.info("OAuth payload rejected: provider or uid missing")
        return None

    # The claim is matched as sent; surrounding whitespace makes it invalid.
    email = auth.info.email or ""
    if not valid_email(email):
        logger.info("OAuth payload rejected: invalid email provider=%s", provider)
        return None

    name = resolve_display_name(auth.info.name, email)
    if not name:
        logger.info("OAuth payload rejected: no usable name provider=%s", provider)
        return None

    existing = find_by_identity(session, provider, uid)
    if existing is not None:
        return Reconciliation(account=existing)

    account = Account(
        email=email.lower(),
        name=name,
        password_hash=hash_password(friendly_token()),
        avatar=auth.info.image,
        provider=provider,
        uid=uid,
    )
    if email_verified_by_provider(auth):
        skip_confirmation(account)
    else:
        generate_confirmation_token(account)

    errors = validate_account(session, account)
    if errors:
        logger.info(
            "OAuth account for provider=%s uid=%s failed validation: %s",
            provider,
            uid,
            "; ".join(errors),
        )
        return Reconciliation(account=account, errors=errors)

    session.add(account)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        winner = find_by_identity(session, provider, uid)
        if winner is not None:
            return Reconciliation(account=winner)
        logger.error("OAuth account creation failed: %s", exc.orig)
        return None

    session.refresh(account)
    logger.info(
        "Provisioned account id=%s provider=%s confirmed=%s",
        account.id,
        provider,
        account.confirmed_at is not None,
    )
    return Reconciliation(account=account, created=True)


def register_account(
    session: Session,
    *,
    email: str,
    password: str,
    name: Optional[str] = None,
    provider: Optional[str] = None,
    uid: Optional[str] = None,
    avatar: Optional[str] = None,
) -> Reconciliation:
    """Create a password account awaiting email confirmation."""

    normalized = (email or "").strip().lower()
    account = Account(
        email=normalized,
        name=resolve_display_name(name, normalized) if normalized else (name or ""),
        password_hash=hash_password(password) if password else "",
        provider=provider if provider and uid else None,
        uid=uid if provider and uid else None,
        avatar=avatar,
    )
    generate_confirmation_token(account)

    errors = validate_account(session, account)
    if not errors and account.provider and find_by_identity(session, account.provider, account.uid):
        errors.append("Uid has already been taken")
    if errors:
        return Reconciliation(account=account, errors=errors)

    session.add(account)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        return Reconciliation(account=account, errors=["Email has already been taken"])

    session.refresh(account)
    logger.info("Registered account id=%s", account.id)
    return Reconciliation(account=account, created=True)


def account_to_dict(account: Account) -> Dict[str, Any]:
    """Serialise an account to an API-friendly dict."""

    return {
        "id": account.id,
        "email": account.email,
        "name": account.name,
        "avatar": account.avatar,
        "provider": account.provider,
        "confirmed": account.confirmed_at is not None,
        "sign_in_count": account.sign_in_count,
    }


def delete_account(session: Session, account: Account) -> None:
    """Remove ``account`` together with its organization memberships."""

    account_id = account.id
    memberships = session.exec(
        select(OrganizationMembership).where(OrganizationMembership.account_id == account_id)
    ).all()
    for membership in memberships:
        session.delete(membership)
    session.delete(account)
    session.commit()
    logger.info("Deleted account id=%s", account_id)


__all__ = [
    "EMAIL_REGEXP",
    "Reconciliation",
    "account_to_dict",
    "delete_account",
    "email_verified_by_provider",
    "find_by_email",
    "find_by_identity",
    "from_oauth",
    "register_account",
    "resolve_display_name",
    "valid_email",
    "validate_account",
]

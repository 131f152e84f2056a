# tests/test_accounts.py
"""
Tests for reconciling provider payloads onto local accounts.

These tests verify:
- new identities provision exactly one account; repeats are idempotent
- payloads without provider, uid or a valid email are rejected
- per-provider email trust decides confirmation
- display name fallback and validation failures
- the insert race is resolved by a single re-lookup
"""
from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from conftest import github_payload, google_payload
from taskforge.models import Account
from taskforge.schemas.auth import AuthPayload
from taskforge.services import accounts as accounts_service
from taskforge.services.accounts import (
    email_verified_by_provider,
    from_oauth,
    register_account,
    resolve_display_name,
    valid_email,
)
from taskforge.services.credentials import hash_password


def _count(db_session) -> int:
    return len(db_session.exec(select(Account)).all())


# ---------------------------------------------------------------------------
# Tests: valid Google payloads
# ---------------------------------------------------------------------------


def test_google_payload_creates_account(db_session):
    result = from_oauth(db_session, google_payload())

    assert result is not None
    assert result.persisted is True
    assert result.created is True
    assert _count(db_session) == 1


def test_google_payload_sets_attributes(db_session):
    account = from_oauth(db_session, google_payload()).account

    assert account.email == "test@example.com"
    assert account.name == "Test User"
    assert account.provider == "google_oauth2"
    assert account.uid == "123456"
    assert account.avatar == "https://example.com/avatar.jpg"


def test_google_verified_email_confirms_account(db_session):
    account = from_oauth(db_session, google_payload()).account

    assert account.confirmed_at is not None
    assert account.confirmation_token is None


def test_repeat_login_returns_same_account(db_session):
    first = from_oauth(db_session, google_payload()).account
    second = from_oauth(db_session, google_payload(name="Renamed", email="new@example.com"))

    assert second.created is False
    assert second.account.id == first.id
    # No attribute refresh on repeat login.
    assert second.account.name == "Test User"
    assert second.account.email == "test@example.com"
    assert _count(db_session) == 1


def test_random_password_is_not_derived_from_payload(db_session):
    a = from_oauth(db_session, google_payload()).account
    b = from_oauth(db_session, google_payload(uid="999999", email="other@example.com")).account

    assert a.password_hash and b.password_hash
    assert a.password_hash != b.password_hash


# ---------------------------------------------------------------------------
# Tests: GitHub payloads
# ---------------------------------------------------------------------------


def test_github_payload_creates_confirmed_account(db_session):
    result = from_oauth(db_session, github_payload())

    assert result.persisted is True
    assert result.account.confirmed_at is not None
    assert _count(db_session) == 1


def test_github_numeric_uid_is_stringified(db_session):
    payload = AuthPayload.model_validate(
        {"provider": "github", "uid": 42, "info": {"email": "octo@example.com"}}
    )
    account = from_oauth(db_session, payload).account

    assert account.uid == "42"
    assert account.name == "octo"


# ---------------------------------------------------------------------------
# Tests: invalid payloads
# ---------------------------------------------------------------------------


def test_none_payload_is_rejected(db_session):
    assert from_oauth(db_session, None) is None


@pytest.mark.parametrize(
    "payload",
    [
        {"uid": "123", "info": {"email": "test@example.com"}},
        {"provider": "google_oauth2", "info": {"email": "test@example.com"}},
        {"provider": "google_oauth2", "uid": "123", "info": {"name": "Test User"}},
        {"provider": "google_oauth2", "uid": "123", "info": {"email": "invalid-email"}},
        {"provider": "  ", "uid": "123", "info": {"email": "test@example.com"}},
        {"provider": "google_oauth2", "uid": "123", "info": {"email": "@example.com"}},
        {"provider": "google_oauth2", "uid": "123", "info": {"email": " test@example.com "}},
        {"provider": "github", "uid": "123", "info": {"email": "test@example.com\n"}},
    ],
)
def test_invalid_payloads_are_rejected_without_records(db_session, payload):
    assert from_oauth(db_session, payload) is None
    assert _count(db_session) == 0


def test_malformed_mapping_is_rejected(db_session):
    assert from_oauth(db_session, {"info": "not-a-mapping"}) is None


# ---------------------------------------------------------------------------
# Tests: email trust
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("flag", [True, "true", "TRUE"])
def test_google_truthy_flags_confirm(db_session, flag):
    account = from_oauth(db_session, google_payload(uid="789", email_verified=flag)).account
    assert account.confirmed_at is not None


@pytest.mark.parametrize("flag", [False, "false", None, "yes"])
def test_google_unverified_email_leaves_account_unconfirmed(db_session, flag):
    payload = google_payload(uid="789", email="unverified@example.com", email_verified=flag)
    account = from_oauth(db_session, payload).account

    assert account.id is not None
    assert account.confirmed_at is None
    assert account.confirmation_token


def test_google_without_extra_is_untrusted():
    payload = AuthPayload(provider="google_oauth2", uid="1", info={"email": "a@example.com"})
    assert email_verified_by_provider(payload) is False


def test_unknown_provider_is_untrusted(db_session):
    payload = AuthPayload(
        provider="gitlab",
        uid="1",
        info={"email": "a@example.com"},
        extra={"raw_info": {"email_verified": True}},
    )
    account = from_oauth(db_session, payload).account

    assert email_verified_by_provider(payload) is False
    assert account.confirmed_at is None


# ---------------------------------------------------------------------------
# Tests: names and validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("name", [None, "", "   "])
def test_missing_name_falls_back_to_email_local_part(db_session, name):
    account = from_oauth(
        db_session, google_payload(uid="999", email="noname@example.com", name=name)
    ).account

    assert account.name == "noname"


def test_resolve_display_name_prefers_claim():
    assert resolve_display_name("  Ada  ", "ada@example.com") == "Ada"
    assert resolve_display_name(None, "ada@example.com") == "ada"


def test_valid_email():
    assert valid_email("user.name+tag@sub.example.com")
    assert not valid_email("no-at-sign")
    assert not valid_email("two@@example.com")
    assert not valid_email("")
    assert not valid_email(None)


def test_overlong_name_returns_unsaved_account_with_errors(db_session):
    result = from_oauth(db_session, google_payload(name="x" * 101))

    assert result is not None
    assert result.persisted is False
    assert result.account.id is None
    assert result.errors == ["Name is too long (maximum is 100 characters)"]
    assert _count(db_session) == 0


def test_email_taken_by_password_account_returns_errors(db_session):
    db_session.add(
        Account(email="test@example.com", name="Existing", password_hash=hash_password("secret123"))
    )
    db_session.commit()

    result = from_oauth(db_session, google_payload(email="Test@Example.com"))

    assert result.persisted is False
    assert result.errors == ["Email has already been taken"]
    assert _count(db_session) == 1


# ---------------------------------------------------------------------------
# Tests: creation race
# ---------------------------------------------------------------------------


def test_conflict_on_insert_returns_concurrent_winner(db_session, monkeypatch):
    winner = Account(
        email="first@example.com",
        name="First",
        password_hash=hash_password("secret123"),
        provider="google_oauth2",
        uid="123456",
    )
    db_session.add(winner)
    db_session.commit()
    db_session.refresh(winner)

    real_lookup = accounts_service.find_by_identity
    calls = {"n": 0}

    def lookup_misses_once(session, provider, uid):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_lookup(session, provider, uid)

    monkeypatch.setattr(accounts_service, "find_by_identity", lookup_misses_once)

    result = from_oauth(db_session, google_payload(email="second@example.com"))

    assert calls["n"] == 2
    assert result is not None
    assert result.created is False
    assert result.account.id == winner.id
    assert _count(db_session) == 1


def test_conflict_without_winner_is_invalid(db_session, monkeypatch):
    def failing_commit():
        raise IntegrityError("INSERT INTO accounts", {}, Exception("UNIQUE constraint failed"))

    monkeypatch.setattr(db_session, "commit", failing_commit)

    assert from_oauth(db_session, google_payload()) is None


# ---------------------------------------------------------------------------
# Tests: password registration
# ---------------------------------------------------------------------------


def test_register_account_is_unconfirmed(db_session):
    result = register_account(
        db_session, email="New@Example.com", password="Password_12345", name="New User"
    )

    assert result.persisted is True
    assert result.account.email == "new@example.com"
    assert result.account.confirmed_at is None
    assert result.account.confirmation_token


def test_register_account_reports_all_errors(db_session):
    result = register_account(db_session, email="bad", password="", name=None)

    assert result.persisted is False
    assert "Email is invalid" in result.errors
    assert "Password can't be blank" in result.errors

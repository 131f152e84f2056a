"""User-facing message catalog for flash notices and alerts."""

from __future__ import annotations

from typing import Any, Dict, Optional

MESSAGES: Dict[str, str] = {
    "omniauth_callbacks.success": "Successfully authenticated from {kind} account.",
    "omniauth_callbacks.failure": 'Could not authenticate you from {kind} because "{reason}".',
    "omniauth_callbacks.invalid_credentials": "Invalid credentials",
    "omniauth_callbacks.access_denied": "You cancelled the sign in request",
    "omniauth_callbacks.csrf_detected": "The sign in request could not be verified",
    "omniauth_callbacks.timeout": "The provider took too long to respond",
    "omniauth_callbacks.unregistered_provider": "This sign in provider is not available",
    "confirmations.confirmed": "Your email address has been successfully confirmed.",
    "confirmations.send_instructions": (
        "You will receive an email with instructions for how to confirm your "
        "email address in a few minutes."
    ),
    "failure.unconfirmed": "You have to confirm your email address before continuing.",
    "failure.invalid": "Invalid email or password.",
    "sessions.signed_in": "Signed in successfully.",
    "sessions.signed_out": "Signed out successfully.",
}


def humanize(token: Any) -> str:
    """Turn ``"invalid_credentials"`` into ``"Invalid credentials"``."""

    text = str(token or "").strip().replace("_", " ")
    if text.endswith(" id"):
        text = text[:-3]
    return text[:1].upper() + text[1:].lower()


def t(key: str, default: Optional[str] = None, **params: Any) -> str:
    """Look up ``key`` and format it with ``params``."""

    template = MESSAGES.get(key)
    if template is None:
        if default is None:
            return key
        template = default
    return template.format(**params) if params else template


__all__ = ["MESSAGES", "humanize", "t"]

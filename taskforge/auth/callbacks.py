"""Provider callback handling.

A callback ends in exactly one of three ways:

* ``AUTHENTICATED``: the payload resolved to a saved account, which is signed in;
* ``NEEDS_REGISTRATION``: the account could not be saved as-is, so the payload
  (minus ``extra``) is parked in the session for the sign-up form;
* ``REJECTED``: the payload was unusable, the provider reported a failure, or
  the account still awaits email confirmation.

Every branch answers with a redirect and a flash message.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from authlib.common.errors import AuthlibBaseError
from sqlmodel import Session
from starlette.requests import Request
from starlette.responses import RedirectResponse

from ..core.config import AFTER_SIGN_IN_PATH, FRONTEND_ORIGIN
from ..core.messages import humanize, t
from ..schemas.auth import AuthPayload
from ..services.accounts import from_oauth
from ..services.confirmation import active_for_authentication
from ..services.flash import flash
from ..services.sessions import sign_in
from .providers import PROVIDER_KINDS, AuthProviderClient, ProviderFailure

logger = logging.getLogger(__name__)

OAUTH_DATA_KEY = "oauth_data"
NEXT_KEY = "next"
REGISTRATION_PATH = "/users/sign_up"
HOME_PATH = "/"


class CallbackOutcome(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    NEEDS_REGISTRATION = "needs_registration"
    REJECTED = "rejected"


@dataclass
class CallbackResult:
    outcome: CallbackOutcome
    location: str
    account_id: Optional[int] = None

    def to_response(self) -> RedirectResponse:
        return RedirectResponse(self.location, status_code=302)


def provider_kind(provider: str) -> str:
    return PROVIDER_KINDS.get(provider) or humanize(provider)


def same_origin(url: str, origin: str) -> bool:
    """Exact scheme and host:port match; prefixes do not count."""

    target, expected = urlsplit(url), urlsplit(origin)
    if not expected.scheme or not expected.netloc:
        return False
    return (
        target.scheme.lower() == expected.scheme.lower()
        and target.netloc.lower() == expected.netloc.lower()
    )


def after_sign_in_location(request: Request) -> str:
    """Stored ``next`` URL when it stays on the frontend, else the default."""

    default = f"{FRONTEND_ORIGIN.rstrip('/')}{AFTER_SIGN_IN_PATH}" if FRONTEND_ORIGIN else AFTER_SIGN_IN_PATH
    next_url = request.session.pop(NEXT_KEY, None)
    if not next_url:
        return default
    next_url = str(next_url)
    if next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    if FRONTEND_ORIGIN and same_origin(next_url, FRONTEND_ORIGIN):
        return next_url
    return default


class CallbackHandler:
    """Turns a provider callback into a session, a sign-up detour or an alert."""

    def __init__(self, client: AuthProviderClient, session: Session) -> None:
        self.client = client
        self.session = session

    async def handle(self, request: Request, provider: str) -> CallbackResult:
        kind = provider_kind(provider)
        try:
            payload = await self.client.fetch_payload(request, provider)
        except ProviderFailure as failure:
            return self.fail(request, failure.error_type, failure.exception, kind=kind)
        except (AuthlibBaseError, ValueError) as exc:
            return self.fail(request, "invalid_credentials", exc, kind=kind)
        return self.complete(request, payload, kind=kind)

    def complete(
        self, request: Request, payload: Optional[AuthPayload], *, kind: str
    ) -> CallbackResult:
        result = from_oauth(self.session, payload)

        if result is None:
            flash(request, "alert", t("omniauth_callbacks.invalid_credentials"))
            return CallbackResult(CallbackOutcome.REJECTED, REGISTRATION_PATH)

        if result.persisted and not active_for_authentication(result.account):
            logger.info("OAuth sign in held for unconfirmed account id=%s", result.account.id)
            flash(request, "alert", t("failure.unconfirmed"))
            return CallbackResult(
                CallbackOutcome.REJECTED, HOME_PATH, account_id=result.account.id
            )

        if result.persisted:
            sign_in(request, self.session, result.account)
            flash(request, "notice", t("omniauth_callbacks.success", kind=kind))
            return CallbackResult(
                CallbackOutcome.AUTHENTICATED,
                after_sign_in_location(request),
                account_id=result.account.id,
            )

        request.session[OAUTH_DATA_KEY] = payload.without_extra()
        flash(request, "alert", "\n".join(result.errors))
        return CallbackResult(CallbackOutcome.NEEDS_REGISTRATION, REGISTRATION_PATH)

    def fail(
        self,
        request: Request,
        error_type: Optional[str],
        exception: Optional[BaseException] = None,
        *,
        kind: str,
    ) -> CallbackResult:
        if exception is not None:
            logger.error(
                "OAuth failure: %s - %s", type(exception).__name__, exception
            )
        else:
            logger.info("OAuth failure from %s: %s", kind, error_type)

        reason = failure_message(error_type)
        flash(request, "alert", t("omniauth_callbacks.failure", kind=kind, reason=reason))
        return CallbackResult(CallbackOutcome.REJECTED, HOME_PATH)


def failure_message(error_type: Optional[str]) -> str:
    token = str(error_type or "invalid_credentials")
    if token in {"success", "failure"}:
        return humanize(token)
    return t(f"omniauth_callbacks.{token}", default=humanize(token))


__all__ = [
    "CallbackHandler",
    "CallbackOutcome",
    "CallbackResult",
    "HOME_PATH",
    "NEXT_KEY",
    "OAUTH_DATA_KEY",
    "REGISTRATION_PATH",
    "after_sign_in_location",
    "failure_message",
    "provider_kind",
    "same_origin",
]

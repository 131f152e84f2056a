"""Identity-provider clients.

Routes talk to an :class:`AuthProviderClient`; the production implementation
wraps authlib's Starlette integration and tests hand in a fake.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.starlette_client import OAuth, OAuthError
from starlette.requests import Request
from starlette.responses import Response

from ..core.config import (
    GITHUB_CLIENT_ID,
    GITHUB_CLIENT_SECRET,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
)
from ..schemas.auth import AuthPayload

logger = logging.getLogger(__name__)

GOOGLE = "google_oauth2"
GITHUB = "github"

PROVIDER_KINDS: Dict[str, str] = {
    GOOGLE: "Google",
    GITHUB: "GitHub",
}


class ProviderFailure(Exception):
    """The provider refused or could not complete the login."""

    def __init__(self, error_type: str, exception: Optional[BaseException] = None) -> None:
        super().__init__(error_type)
        self.error_type = error_type or "invalid_credentials"
        self.exception = exception


class AuthProviderClient(ABC):
    """Contract between the auth routes and an identity provider."""

    @property
    @abstractmethod
    def providers(self) -> Iterable[str]:
        """Provider keys this client can serve."""

    def supports(self, provider: str) -> bool:
        return provider in set(self.providers)

    @abstractmethod
    async def authorize_redirect(
        self, request: Request, provider: str, redirect_uri: str
    ) -> Response:
        """Send the browser to the provider's consent page."""

    @abstractmethod
    async def fetch_payload(self, request: Request, provider: str) -> AuthPayload:
        """Complete the callback and describe the user.

        Raises:
            ProviderFailure: the provider denied or failed the login.
        """


class AuthlibProviderClient(AuthProviderClient):
    """Google (OpenID Connect) and GitHub (OAuth2) through authlib."""

    def __init__(
        self,
        *,
        google_client_id: str = GOOGLE_CLIENT_ID,
        google_client_secret: str = GOOGLE_CLIENT_SECRET,
        github_client_id: str = GITHUB_CLIENT_ID,
        github_client_secret: str = GITHUB_CLIENT_SECRET,
    ) -> None:
        self._oauth = OAuth()
        self._configured: Dict[str, bool] = {}

        self._oauth.register(
            name=GOOGLE,
            client_id=google_client_id or "dummy",
            client_secret=google_client_secret or "dummy",
            server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
            client_kwargs={"scope": "openid email profile"},
        )
        self._configured[GOOGLE] = bool(google_client_id and google_client_secret)

        self._oauth.register(
            name=GITHUB,
            client_id=github_client_id or "dummy",
            client_secret=github_client_secret or "dummy",
            access_token_url="https://github.com/login/oauth/access_token",
            authorize_url="https://github.com/login/oauth/authorize",
            api_base_url="https://api.github.com/",
            client_kwargs={"scope": "read:user user:email"},
        )
        self._configured[GITHUB] = bool(github_client_id and github_client_secret)

        for name, ok in self._configured.items():
            if not ok:
                logger.warning("OAuth provider %s is not configured", name)

    @property
    def providers(self) -> Iterable[str]:
        return tuple(PROVIDER_KINDS)

    def configured(self, provider: str) -> bool:
        return self._configured.get(provider, False)

    async def authorize_redirect(
        self, request: Request, provider: str, redirect_uri: str
    ) -> Response:
        if not self.configured(provider):
            raise ProviderFailure("unregistered_provider")
        client = self._oauth.create_client(provider)
        return await client.authorize_redirect(request, redirect_uri)

    async def fetch_payload(self, request: Request, provider: str) -> AuthPayload:
        if not self.supports(provider):
            raise ProviderFailure("unregistered_provider")

        # Consent denied or provider-side error come back as query parameters.
        error = request.query_params.get("error")
        if error:
            raise ProviderFailure(error)

        client = self._oauth.create_client(provider)
        try:
            token = await client.authorize_access_token(request)
            if provider == GOOGLE:
                return await self._google_payload(client, token)
            return await self._github_payload(client, token)
        except OAuthError as exc:
            raise ProviderFailure(exc.error or "invalid_credentials", exc) from exc
        except httpx.TimeoutException as exc:
            raise ProviderFailure("timeout", exc) from exc
        except httpx.HTTPError as exc:
            raise ProviderFailure("service_unavailable", exc) from exc
        except (AuthlibBaseError, ValueError) as exc:
            # Bad id_token, nonce mismatch or an unreadable response body.
            raise ProviderFailure("invalid_credentials", exc) from exc

    async def _google_payload(self, client: Any, token: Dict[str, Any]) -> AuthPayload:
        userinfo = token.get("userinfo") or await client.userinfo(token=token)
        userinfo = dict(userinfo or {})
        return AuthPayload(
            provider=GOOGLE,
            uid=userinfo.get("sub"),
            info={
                "email": userinfo.get("email"),
                "name": userinfo.get("name"),
                "image": userinfo.get("picture"),
            },
            extra={"raw_info": userinfo},
        )

    async def _github_payload(self, client: Any, token: Dict[str, Any]) -> AuthPayload:
        response = await client.get("user", token=token)
        response.raise_for_status()
        profile = response.json()

        email = profile.get("email")
        if not email:
            emails = await client.get("user/emails", token=token)
            if emails.status_code == 200:
                email = _primary_verified_email(emails.json())

        return AuthPayload(
            provider=GITHUB,
            uid=profile.get("id"),
            info={
                "email": email,
                "name": profile.get("name") or profile.get("login"),
                "image": profile.get("avatar_url"),
            },
            extra={"raw_info": profile},
        )


def _primary_verified_email(entries: Any) -> Optional[str]:
    for entry in entries or []:
        if entry.get("primary") and entry.get("verified"):
            return entry.get("email")
    return None


_default_client: Optional[AuthProviderClient] = None


def get_provider_client() -> AuthProviderClient:
    """FastAPI dependency returning the process-wide provider client."""

    global _default_client
    if _default_client is None:
        _default_client = AuthlibProviderClient()
    return _default_client


__all__ = [
    "AuthProviderClient",
    "AuthlibProviderClient",
    "GITHUB",
    "GOOGLE",
    "PROVIDER_KINDS",
    "ProviderFailure",
    "get_provider_client",
]

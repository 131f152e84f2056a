"""OAuth authentication routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session

from ...auth.callbacks import NEXT_KEY, CallbackHandler, provider_kind
from ...auth.providers import AuthProviderClient, ProviderFailure, get_provider_client
from ...core import get_session
from ...core.config import OAUTH_REDIRECT_BASE

router = APIRouter(tags=["auth"])


def _require_provider(client: AuthProviderClient, provider: str) -> None:
    if not client.supports(provider):
        raise HTTPException(status_code=404, detail=f"Unknown provider: {provider}")


@router.get("/auth/failure")
def auth_failure(
    request: Request,
    error_type: Optional[str] = None,
    strategy: Optional[str] = None,
    session: Session = Depends(get_session),
    client: AuthProviderClient = Depends(get_provider_client),
):
    kind = provider_kind(strategy) if strategy else "OAuth"
    result = CallbackHandler(client, session).fail(request, error_type, kind=kind)
    return result.to_response()


@router.get("/auth/{provider}")
async def auth_start(
    provider: str,
    request: Request,
    next: str | None = None,
    session: Session = Depends(get_session),
    client: AuthProviderClient = Depends(get_provider_client),
):
    _require_provider(client, provider)

    if next:
        request.session[NEXT_KEY] = next
    redirect_uri = f"{OAUTH_REDIRECT_BASE}/auth/{provider}/callback"
    try:
        return await client.authorize_redirect(request, provider, redirect_uri)
    except ProviderFailure as failure:
        handler = CallbackHandler(client, session)
        result = handler.fail(
            request, failure.error_type, failure.exception, kind=provider_kind(provider)
        )
        return result.to_response()


@router.get("/auth/{provider}/callback")
async def auth_callback(
    provider: str,
    request: Request,
    session: Session = Depends(get_session),
    client: AuthProviderClient = Depends(get_provider_client),
):
    _require_provider(client, provider)

    result = await CallbackHandler(client, session).handle(request, provider)
    return result.to_response()


__all__ = ["router"]

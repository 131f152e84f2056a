"""Account registration, confirmation and password sessions."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import Session

from ...auth.callbacks import HOME_PATH, OAUTH_DATA_KEY
from ...core import get_session, t
from ...schemas.auth import RegistrationRequest, SignInRequest
from ...services.accounts import account_to_dict, delete_account, register_account
from ...services.confirmation import active_for_authentication, confirm_by_token
from ...services.credentials import authenticate
from ...services.flash import flash, pop_flashes
from ...services.sessions import current_account, sign_in, sign_out

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.get("/users/sign_up")
def sign_up_form(request: Request):
    """Data for the sign-up form, prefilled from a parked provider payload."""

    return {
        "oauth_data": request.session.get(OAUTH_DATA_KEY),
        "flash": pop_flashes(request),
    }


@router.post("/users", status_code=201)
def register(
    body: RegistrationRequest,
    request: Request,
    session: Session = Depends(get_session),
):
    oauth_data = request.session.get(OAUTH_DATA_KEY) or {}
    info = oauth_data.get("info") or {}

    result = register_account(
        session,
        email=body.email,
        password=body.password,
        name=body.name or info.get("name"),
        provider=oauth_data.get("provider"),
        uid=oauth_data.get("uid"),
        avatar=info.get("image"),
    )
    if result.errors:
        raise HTTPException(status_code=422, detail=result.errors)

    request.session.pop(OAUTH_DATA_KEY, None)
    logger.info("Confirmation instructions pending for account id=%s", result.account.id)
    flash(request, "notice", t("confirmations.send_instructions"))
    return account_to_dict(result.account)


@router.get("/users/confirmation")
def confirm(
    confirmation_token: str,
    request: Request,
    session: Session = Depends(get_session),
):
    account = confirm_by_token(session, confirmation_token)
    if account is None:
        raise HTTPException(status_code=422, detail=["Confirmation token is invalid"])

    flash(request, "notice", t("confirmations.confirmed"))
    return RedirectResponse(HOME_PATH, status_code=302)


@router.post("/users/sign_in")
def password_sign_in(
    body: SignInRequest,
    request: Request,
    session: Session = Depends(get_session),
):
    account = authenticate(session, body.email, body.password)
    if account is None:
        raise HTTPException(status_code=401, detail=t("failure.invalid"))
    if not active_for_authentication(account):
        raise HTTPException(status_code=403, detail=t("failure.unconfirmed"))

    sign_in(request, session, account)
    flash(request, "notice", t("sessions.signed_in"))
    return {"user": account_to_dict(account)}


@router.post("/users/sign_out")
def password_sign_out(request: Request):
    sign_out(request)
    flash(request, "notice", t("sessions.signed_out"))
    return JSONResponse({"ok": True})


@router.get("/me")
def me(request: Request, session: Session = Depends(get_session)):
    account = current_account(request, session)
    if account is None:
        return JSONResponse({"user": None})
    return JSONResponse({"user": account_to_dict(account)})


@router.delete("/me")
def delete_me(request: Request, session: Session = Depends(get_session)):
    account = current_account(request, session)
    if account is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    delete_account(session, account)
    sign_out(request)
    return JSONResponse({"ok": True})


__all__ = ["router"]

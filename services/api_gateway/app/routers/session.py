"""Session cookie endpoints.

``/sessionLogin`` signs in with email/password through the identity
service and sets an HTTP-only, secure session cookie; ``/sessionLogout``
revokes the session and clears the cookie.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from shared.auth import (
    AuthServiceError,
    InvalidCredentials,
    create_session_cookie,
    revoke_session,
    sign_in_with_password,
)
from shared.models import SessionAck, SessionLoginRequest
from shared.settings import Settings
from shared.tracing import get_logger, log_event

_settings = Settings()
_log = get_logger("session")

router = APIRouter()

_COOKIE_NAME = _settings.session_cookie_name


@router.post("/sessionLogin", response_model=SessionAck)
async def session_login(request: SessionLoginRequest) -> JSONResponse:
    """Exchange email/password for a session cookie."""
    email = (request.email or "").strip()
    password = request.password or ""
    if not email or not password:
        raise HTTPException(status_code=400, detail="Email and password are required.")

    try:
        id_token = await sign_in_with_password(email, password)
        cookie = await asyncio.to_thread(
            create_session_cookie, id_token, _settings.session_cookie_days
        )
    except InvalidCredentials as e:
        log_event("SessionLoginRejected", payload={"code": str(e)})
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    except AuthServiceError as e:
        _log.error("Session login failed: %s", e)
        raise HTTPException(status_code=500, detail="Unable to sign in right now.")

    resp = JSONResponse(content=SessionAck().model_dump())
    resp.set_cookie(
        key=_COOKIE_NAME,
        value=cookie,
        max_age=_settings.session_cookie_days * 24 * 3600,
        httponly=True,
        secure=True,
        samesite="strict",
        path="/",
    )
    return resp


@router.post("/sessionLogout", response_model=SessionAck)
async def session_logout(request: Request) -> JSONResponse:
    """Clear the session cookie; revocation is best effort."""
    await asyncio.to_thread(revoke_session, request.cookies.get(_COOKIE_NAME))
    resp = JSONResponse(content=SessionAck().model_dump())
    resp.delete_cookie(key=_COOKIE_NAME, path="/", secure=True, httponly=True, samesite="strict")
    return resp

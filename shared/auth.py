"""Identity collaborator: Firebase Auth token and session-cookie handling.

- Callers of the query endpoint authenticate either with a Firebase ID
  token (``Authorization: Bearer <token>``) or with the session cookie
  minted by ``/sessionLogin``.
- Email/password sign-in goes through the Identity Toolkit REST API since
  the Admin SDK cannot verify passwords; the resulting ID token is then
  exchanged for a session cookie with the Admin SDK.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

import httpx
from firebase_admin import auth, exceptions

from shared.firebase import get_app
from shared.models import Principal
from shared.settings import Settings
from shared.tracing import get_logger, span

_log = get_logger("auth")

# Identity Toolkit error codes that mean "wrong email or password"
_CREDENTIAL_ERRORS = {
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "INVALID_EMAIL",
    "USER_DISABLED",
    "MISSING_PASSWORD",
}


class InvalidCredentials(Exception):
    """The identity service rejected the email/password pair."""


class AuthServiceError(Exception):
    """The identity service is unreachable or misconfigured."""


def _principal_from_claims(claims: dict) -> Principal:
    return Principal(uid=claims["uid"], email=claims.get("email"), claims=claims)


def resolve_principal(
    authorization: Optional[str], session_cookie: Optional[str]
) -> Optional[Principal]:
    """Return the authenticated caller, or ``None`` when there is none.

    A bearer ID token takes precedence over the session cookie. Invalid,
    expired or revoked credentials are logged and treated as absent.
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip() or None

    try:
        if token:
            with span("auth.verify_id_token"):
                return _principal_from_claims(
                    auth.verify_id_token(token, app=get_app())
                )
        if session_cookie:
            with span("auth.verify_session_cookie"):
                return _principal_from_claims(
                    auth.verify_session_cookie(
                        session_cookie, check_revoked=True, app=get_app()
                    )
                )
    except (
        auth.InvalidIdTokenError,
        auth.InvalidSessionCookieError,
        auth.UserNotFoundError,
    ) as e:
        # Expired/revoked errors subclass the first two; a deleted account
        # surfaces as UserNotFoundError from the revocation check
        _log.info("Rejected credentials: %s", type(e).__name__)
    except (ValueError, exceptions.FirebaseError) as e:
        _log.warning("Credential verification failed: %s", e)
    return None


async def sign_in_with_password(email: str, password: str) -> str:
    """Exchange email/password for a Firebase ID token."""
    s = Settings()
    if not s.firebase_web_api_key:
        raise AuthServiceError("FIREBASE_WEB_API_KEY is not configured")

    url = f"{s.identity_toolkit_url.rstrip('/')}/accounts:signInWithPassword"
    payload = {"email": email, "password": password, "returnSecureToken": True}
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(s.auth_timeout_seconds)
        ) as client:
            r = await client.post(url, params={"key": s.firebase_web_api_key}, json=payload)
    except httpx.HTTPError as e:
        raise AuthServiceError(f"identity service unreachable: {e}") from e

    if r.status_code == 400:
        try:
            code = r.json().get("error", {}).get("message", "")
        except ValueError:
            code = ""
        # Messages look like "INVALID_PASSWORD" or "TOO_MANY_ATTEMPTS_TRY_LATER : ..."
        code = code.split(":", 1)[0].strip()
        if code in _CREDENTIAL_ERRORS:
            raise InvalidCredentials(code)
        raise AuthServiceError(f"identity service rejected sign-in: {code or r.text[:200]}")
    if r.status_code != 200:
        raise AuthServiceError(f"identity service returned {r.status_code}")

    id_token = r.json().get("idToken")
    if not id_token:
        raise AuthServiceError("identity service response carried no idToken")
    return id_token


def create_session_cookie(id_token: str, days: int) -> str:
    try:
        with span("auth.create_session_cookie", days=days):
            cookie = auth.create_session_cookie(
                id_token, expires_in=timedelta(days=days), app=get_app()
            )
    except (exceptions.FirebaseError, ValueError) as e:
        raise AuthServiceError(f"session cookie creation failed: {e}") from e
    return cookie.decode() if isinstance(cookie, bytes) else cookie


def revoke_session(session_cookie: Optional[str]) -> None:
    """Revoke refresh tokens for the cookie's user. Failures are only logged."""
    if not session_cookie:
        return
    try:
        claims = auth.verify_session_cookie(session_cookie, app=get_app())
        auth.revoke_refresh_tokens(claims["uid"], app=get_app())
    except (auth.InvalidSessionCookieError, ValueError, auth.UserNotFoundError) as e:
        _log.info("Session cookie not revoked: %s", type(e).__name__)
    except Exception as e:
        _log.warning("Session revocation failed: %s", e)

"""
Stateless signed session tokens.

The token carries account id, role and issue time, signed with SECRET_KEY.
Nothing is stored server-side: a token is trusted only if the signature
checks out and it is younger than SESSION_LIFETIME_SECONDS. Active sessions
get a fresh token once per SESSION_REFRESH_SECONDS, so only idle sessions
hit the hard expiry.
"""
import time
from typing import NamedTuple, Optional

from flask import current_app
from itsdangerous import BadData, URLSafeTimedSerializer

SESSION_SALT = "inkwell.session"


class SessionClaims(NamedTuple):
    account_id: str
    role: str
    issued_at: float  # epoch seconds


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=SESSION_SALT)


def issue_session_token(account) -> str:
    return _serializer().dumps({"sub": account.id, "role": account.role})


def validate_session_token(token: str) -> Optional[SessionClaims]:
    """
    Returns the claims, or None for a missing, tampered, expired or malformed token.
    """
    if not token:
        return None

    max_age = current_app.config.get("SESSION_LIFETIME_SECONDS", 24 * 60 * 60)
    try:
        payload, signed_at = _serializer().loads(token, max_age=max_age, return_timestamp=True)
    except BadData:
        return None

    if not isinstance(payload, dict):
        return None
    account_id = payload.get("sub")
    role = payload.get("role")
    if not isinstance(account_id, str) or not isinstance(role, str):
        return None

    return SessionClaims(account_id, role, signed_at.timestamp())


def needs_refresh(claims: SessionClaims) -> bool:
    refresh_after = current_app.config.get("SESSION_REFRESH_SECONDS", 60 * 60)
    return time.time() - claims.issued_at >= refresh_after


def set_session_cookie(resp, token: str):
    resp.set_cookie(
        current_app.config.get("AUTH_COOKIE_NAME", "inkwell_session"),
        token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 24 * 60 * 60),
        path="/",
    )
    return resp


def clear_session_cookie(resp):
    resp.delete_cookie(current_app.config.get("AUTH_COOKIE_NAME", "inkwell_session"), path="/")
    return resp

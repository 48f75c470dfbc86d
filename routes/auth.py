import math

from flask import Blueprint, request, jsonify, g, redirect, render_template_string

from security.bruteforce import get_login_guard
from security.credentials import verify_credentials
from security.csrf import issue_csrf_token, clear_csrf_token
from security.errors import AccountLocked, InvalidCredentials
from security.rate_limit import get_rate_limiter
from security.sanitize import normalize_email
from security.session import issue_session_token, set_session_cookie, clear_session_cookie
from utils.audit import log_event
from utils.auth_context import login_required
from utils.request_info import client_ip


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

DEFAULT_NEXT = "/admin"

LOGIN_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Sign in</title>
</head>
<body>
  <main>
    <h1>Sign in</h1>
    {% if error %}<p class="error" role="alert">{{ error }}</p>{% endif %}
    <form method="post" action="{{ url_for('auth.login') }}">
      <input type="hidden" name="next" value="{{ next_url }}">
      <label>Email <input type="email" name="email" value="{{ email }}" required autocomplete="username"></label>
      <label>Password <input type="password" name="password" required autocomplete="current-password"></label>
      <button type="submit">Sign in</button>
    </form>
  </main>
</body>
</html>
"""


def _safe_next(value) -> str:
    # local paths only, no open redirects
    if not isinstance(value, str) or not value.startswith("/") or value.startswith("//") or "\\" in value:
        return DEFAULT_NEXT
    return value


def _login_failure(as_json: bool, message: str, status: int, email: str, next_url: str, **extra):
    if as_json:
        return jsonify(error=message, **extra), status
    page = render_template_string(LOGIN_TEMPLATE, error=message, email=email, next_url=next_url)
    return page, status


@auth_bp.get("/login")
def login_page():
    next_url = _safe_next(request.args.get("next"))
    if getattr(g, "user", None) is not None:
        return redirect(next_url, code=303)
    return render_template_string(LOGIN_TEMPLATE, error=None, email="", next_url=next_url), 200


@auth_bp.post("/login")
def login():
    as_json = request.is_json
    data = (request.get_json(silent=True) or {}) if as_json else request.form
    email = normalize_email(data.get("email") if isinstance(data.get("email"), str) else "")
    password = data.get("password") if isinstance(data.get("password"), str) else ""
    next_url = _safe_next(data.get("next") or request.args.get("next"))

    limiter = get_rate_limiter("login")
    rate = limiter.check(client_ip())
    if not rate.allowed:
        log_event("LOGIN_RATE_LIMIT", metadata={"email": email, "reset_time": rate.reset_time})
        retry_after = max(int(math.ceil(rate.reset_time - limiter.now())), 1)
        return _login_failure(
            as_json, "Too many login requests. Slow down.", 429, email, next_url,
            retry_after_seconds=retry_after,
        )

    if not email or not password:
        return _login_failure(as_json, "Email and password are required", 400, email, next_url)

    guard = get_login_guard()
    try:
        user = guard.authenticate(email, password, verify_credentials)
    except AccountLocked as exc:
        log_event("LOGIN_LOCKED", metadata={"email": email, "minutes_remaining": exc.minutes_remaining})
        return _login_failure(
            as_json, exc.message, exc.status_code, email, next_url,
            retry_after_minutes=exc.minutes_remaining,
        )
    except InvalidCredentials as exc:
        log_event("LOGIN_FAIL", metadata={"email": email, "fail_count": guard.attempts(email)})
        return _login_failure(as_json, exc.message, exc.status_code, email, next_url)

    if as_json:
        resp = jsonify(message="Login OK", account=user.to_public_dict(), redirect=next_url)
    else:
        resp = redirect(next_url, code=303)

    set_session_cookie(resp, issue_session_token(user))
    issue_csrf_token(resp)

    # the fresh cookie must not be overwritten by the refresh hook
    g.user = None
    g.session = None

    log_event("LOGIN_SUCCESS", account_id=user.id)
    return resp


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(
        **g.user.to_public_dict(),
        session_issued_at=int(g.session.issued_at),
    ), 200


@auth_bp.post("/logout")
def logout():
    account_id = g.user.id if getattr(g, "user", None) is not None else None
    g.user = None
    g.session = None

    resp = jsonify(message="Logged out")
    clear_session_cookie(resp)
    clear_csrf_token(resp)

    if account_id:
        log_event("LOGOUT", account_id=account_id)
    return resp, 200

from functools import wraps
from flask import g, jsonify, request, current_app
from security.csrf import CSRF_COOKIE, issue_csrf_token
from security.session import (
    issue_session_token,
    needs_refresh,
    set_session_cookie,
    validate_session_token,
)
from models import db
from models.user import User

def load_current_user():
    g.user = None
    g.session = None

    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "inkwell_session")
    claims = validate_session_token(request.cookies.get(cookie_name))
    if not claims:
        return

    user = db.session.get(User, claims.account_id)
    if user is None:
        return
    g.session = claims
    g.user = user

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(error="Authentication required"), 401
        return fn(*args, **kwargs)
    return wrapper

def refresh_session(resp):
    """
    Reissues the session cookie once the current token is an hour old.
    """
    claims = getattr(g, "session", None)
    if claims is None or getattr(g, "user", None) is None or not needs_refresh(claims):
        return resp

    set_session_cookie(resp, issue_session_token(g.user))
    issue_csrf_token(resp, request.cookies.get(CSRF_COOKIE))
    return resp

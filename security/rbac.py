from functools import wraps
from flask import g, jsonify

MODERATOR_ROLES = ("admin", "editor")

def has_role(*role_names: str) -> bool:
    user = getattr(g, "user", None)
    if not user:
        return False
    return g.session.role in role_names

def require_roles(*role_names: str):
    """
    Usage: @require_roles("admin", "editor")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if getattr(g, "user", None) is None:
                return jsonify(error="Authentication required"), 401

            # the signed role is what gets trusted
            if not has_role(*role_names):
                return jsonify(error="Forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator

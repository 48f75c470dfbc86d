from flask import Blueprint, jsonify, g, redirect, request, url_for
from sqlalchemy import func

from models import db
from models.comment import Comment, COMMENT_STATUSES
from security.rbac import has_role, MODERATOR_ROLES

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.get("")
def dashboard():
    if getattr(g, "user", None) is None:
        # no session: back to the login page
        return redirect(url_for("auth.login_page", next=request.path), code=303)
    if not has_role(*MODERATOR_ROLES):
        return jsonify(error="Forbidden"), 403

    counts = dict(
        db.session.query(Comment.status, func.count(Comment.id))
        .group_by(Comment.status)
        .all()
    )
    return jsonify(
        account=g.user.to_public_dict(),
        comment_counts={status: counts.get(status, 0) for status in COMMENT_STATUSES},
    ), 200

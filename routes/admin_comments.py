import math

from sqlalchemy.exc import SQLAlchemyError
from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.comment import Comment, COMMENT_STATUSES
from security.rbac import require_roles, MODERATOR_ROLES
from utils.audit import log_event

admin_comments_bp = Blueprint("admin_comments", __name__, url_prefix="/admin/comments")


def _admin_dict(comment: Comment) -> dict:
    out = comment.to_dict()
    out["post_title"] = comment.post.title if comment.post else None
    return out


def _thread_ids(root_id: str) -> list:
    ids, frontier = [root_id], [root_id]
    while frontier:
        frontier = [
            cid for (cid,) in db.session.query(Comment.id).filter(Comment.parent_id.in_(frontier)).all()
        ]
        ids.extend(frontier)
    return ids


@admin_comments_bp.get("")
@require_roles(*MODERATOR_ROLES)
def list_comments():
    default_limit = current_app.config.get("ADMIN_PAGE_SIZE", 20)
    max_limit = current_app.config.get("ADMIN_PAGE_SIZE_MAX", 100)

    page = max(request.args.get("page", type=int) or 1, 1)
    limit = request.args.get("limit", type=int) or default_limit
    limit = max(1, min(limit, max_limit))

    status = request.args.get("status") or "all"
    if status != "all" and status not in COMMENT_STATUSES:
        return jsonify(error="Invalid status", allowed=["all", *COMMENT_STATUSES]), 400

    q = Comment.query
    if status != "all":
        q = q.filter(Comment.status == status)

    total = q.count()
    rows = (
        q.order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return jsonify(
        comments=[_admin_dict(c) for c in rows],
        pagination={
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        },
    ), 200


@admin_comments_bp.patch("/<comment_id>")
@require_roles(*MODERATOR_ROLES)
def update_comment_status(comment_id):
    data = request.get_json(silent=True) or {}
    status = data.get("status")

    if not status:
        return jsonify(error="status is required"), 400
    if status not in COMMENT_STATUSES:
        return jsonify(error="Invalid status", allowed=list(COMMENT_STATUSES)), 400

    comment = db.session.get(Comment, comment_id)
    if not comment:
        return jsonify(error="Comment not found"), 404

    previous = comment.status
    comment.status = status
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to update comment %s", comment_id)
        return jsonify(error="Failed to update comment status"), 500

    log_event(
        "COMMENT_STATUS_UPDATE",
        account_id=g.user.id,
        entity="comment",
        entity_id=comment.id,
        metadata={"from": previous, "to": status},
    )
    return jsonify(_admin_dict(comment)), 200


@admin_comments_bp.delete("/<comment_id>")
@require_roles(*MODERATOR_ROLES)
def delete_comment(comment_id):
    comment = db.session.get(Comment, comment_id)
    if not comment:
        return jsonify(error="Comment not found"), 404

    # replies go with their parent
    ids = _thread_ids(comment.id)
    try:
        Comment.query.filter(Comment.id.in_(ids)).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to delete comment %s", comment_id)
        return jsonify(error="Failed to delete comment"), 500

    log_event(
        "COMMENT_DELETE",
        account_id=g.user.id,
        entity="comment",
        entity_id=comment_id,
        metadata={"deleted": len(ids)},
    )
    return jsonify(message="Comment deleted", deleted=len(ids)), 200

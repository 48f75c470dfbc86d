import math

from sqlalchemy.exc import SQLAlchemyError
from flask import Blueprint, request, jsonify, current_app

from models import db
from models.post import Post
from models.comment import Comment
from security.rate_limit import get_rate_limiter
from security.sanitize import sanitize_comment, sanitize_url
from utils.audit import log_event
from utils.comment_tree import build_comment_tree
from utils.request_info import client_ip, user_agent
from utils.validation import validate_comment_payload, parse_identifier

comments_bp = Blueprint("comments", __name__, url_prefix="/comments")


def _rate_limit_headers(resp, result):
    resp.headers["X-RateLimit-Remaining"] = str(result.remaining)
    # epoch milliseconds
    resp.headers["X-RateLimit-Reset"] = str(int(math.ceil(result.reset_time * 1000)))
    return resp


@comments_bp.get("")
def list_comments():
    post_id = parse_identifier(request.args.get("post_id"))
    if post_id is None:
        return jsonify(error="post_id is required"), 400

    rows = (
        Comment.query
        .filter_by(post_id=post_id, status="approved")
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )
    return jsonify(comments=build_comment_tree(rows)), 200


@comments_bp.post("")
def create_comment():
    ip = client_ip()

    rate = get_rate_limiter("comments").check(ip)
    if not rate.allowed:
        log_event("COMMENT_RATE_LIMIT", metadata={"reset_time": rate.reset_time})
        resp = jsonify(
            error="Commenting too frequently. Please try again later.",
            remaining=rate.remaining,
            reset_time=int(math.ceil(rate.reset_time * 1000)),
        )
        return _rate_limit_headers(resp, rate), 429

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify(error="Validation failed", details=[{"field": None, "message": "JSON object body required"}]), 400

    cleaned, errors = validate_comment_payload(data)
    if errors:
        return jsonify(error="Validation failed", details=errors), 400

    if db.session.get(Post, cleaned["post_id"]) is None:
        return jsonify(error="Post not found"), 404

    if cleaned["parent_id"]:
        parent = db.session.get(Comment, cleaned["parent_id"])
        if parent is None or parent.post_id != cleaned["post_id"]:
            return jsonify(
                error="Validation failed",
                details=[{"field": "parent_id", "message": "Parent comment not found on this post"}],
            ), 400

    comment = Comment(
        post_id=cleaned["post_id"],
        parent_id=cleaned["parent_id"],
        author_name=sanitize_comment(cleaned["author_name"]),
        author_email=sanitize_comment(cleaned["author_email"]) or None,
        author_url=sanitize_url(cleaned["author_url"]) or None,
        content=sanitize_comment(cleaned["content"]),
        # whatever the client sent, new comments wait for a moderator
        status="pending",
        ip_address=ip,
        user_agent=user_agent() or None,
    )
    db.session.add(comment)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to store comment for post %s", cleaned["post_id"])
        return jsonify(error="Failed to submit comment"), 500

    log_event("COMMENT_CREATE", entity="comment", entity_id=comment.id, metadata={"post_id": comment.post_id})

    body = comment.to_public_dict()
    body["status"] = comment.status
    resp = jsonify(message="Comment submitted and awaiting moderation", comment=body)
    return _rate_limit_headers(resp, rate), 201

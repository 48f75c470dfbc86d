from datetime import datetime
from models.db import db
from models.user import _new_id

COMMENT_STATUSES = ("pending", "approved", "spam", "trash")


class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    post_id = db.Column(db.String(36), db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    # null means top-level; no depth limit here
    parent_id = db.Column(db.String(36), db.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)

    # sanitized before they ever reach this table
    author_name = db.Column(db.Text, nullable=False)
    author_email = db.Column(db.Text, nullable=True)
    author_url = db.Column(db.String(500), nullable=True)
    content = db.Column(db.Text, nullable=False)

    status = db.Column(db.String(20), nullable=False, default="pending", index=True)

    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    post = db.relationship("Post", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "post_id": self.post_id,
            "parent_id": self.parent_id,
            "author_name": self.author_name,
            "author_email": self.author_email,
            "author_url": self.author_url,
            "content": self.content,
            "status": self.status,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_public_dict(self) -> dict:
        # never leak submitter email/ip/user agent on the public site
        return {
            "id": self.id,
            "post_id": self.post_id,
            "parent_id": self.parent_id,
            "author_name": self.author_name,
            "author_url": self.author_url,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

from datetime import datetime
from models.db import db
from models.user import _new_id


class Post(db.Model):
    __tablename__ = "posts"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="draft")  # draft | published | archived

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

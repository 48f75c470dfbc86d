from .db import db
from .user import User
from .post import Post
from .comment import Comment
from .audit_log import AuditLog

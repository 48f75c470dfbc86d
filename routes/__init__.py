from .health import health_bp
from .auth import auth_bp
from .admin import admin_bp
from .admin_comments import admin_comments_bp
from .comments import comments_bp

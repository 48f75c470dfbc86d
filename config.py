import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    APP_ENV = os.getenv("APP_ENV", "development")

    # SQLite database file stored next to the app as inkwell.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "inkwell.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie name for our signed auth token
    AUTH_COOKIE_NAME = "inkwell_session"

    # 24 hours session lifetime, reissued once per hour of activity
    SESSION_LIFETIME_SECONDS = 24 * 60 * 60
    SESSION_REFRESH_SECONDS = 60 * 60

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = APP_ENV == "production"

    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Brute-force protection (per account email)
    MAX_LOGIN_ATTEMPTS = 5
    LOCKOUT_MINUTES = 15
    LOGIN_BACKOFF_BASE_SECONDS = 1
    LOGIN_BACKOFF_MAX_SECONDS = 10

    # Sliding window rate limits
    LOGIN_RATE_WINDOW_SECONDS = 15 * 60
    LOGIN_RATE_MAX_REQUESTS = 10
    COMMENT_RATE_WINDOW_SECONDS = 60
    COMMENT_RATE_MAX_REQUESTS = 5
    RATE_LIMIT_CLEANUP_ENABLED = True

    # Comment payload limits
    COMMENT_AUTHOR_NAME_MAX = 50
    COMMENT_CONTENT_MAX = 2000

    # Moderation list paging
    ADMIN_PAGE_SIZE = 20
    ADMIN_PAGE_SIZE_MAX = 100

    # Password policy
    PASSWORD_MIN_LEN = 12

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SESSION_COOKIE_SECURE = False
    BCRYPT_ROUNDS = 4
    RATE_LIMIT_CLEANUP_ENABLED = False
    LOGIN_BACKOFF_BASE_SECONDS = 0
    LOGIN_BACKOFF_MAX_SECONDS = 0

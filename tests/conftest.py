"""
pytest configuration – a fresh app with an in-memory database per test.

Throttling state is rebuilt on a fake clock so windows and lockouts can be
advanced without sleeping.
"""
import pytest

from app import create_app
from config import TestConfig
from models import db
from models.post import Post
from models.user import User
from security.bruteforce import LoginThrottleGuard
from security.password import hash_password
from security.rate_limit import RateLimiter

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Correct-Horse-42!"


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def app(clock, sleeps):
    app = create_app(TestConfig)
    app.extensions["rate_limiters"] = {
        "comments": RateLimiter(60, 5, clock=clock),
        "login": RateLimiter(900, 10, clock=clock),
    }
    app.extensions["login_guard"] = LoginThrottleGuard(
        max_attempts=5,
        lockout_seconds=900,
        clock=clock,
        sleep=sleeps.append,
    )
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_account(app):
    def _make(email=ADMIN_EMAIL, password=ADMIN_PASSWORD, role="admin", name="Admin"):
        with app.app_context():
            user = User(email=email, name=name, role=role, password_hash=hash_password(password))
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture
def admin_id(make_account):
    return make_account()


@pytest.fixture
def post_id(app):
    with app.app_context():
        post = Post(title="Hello world", slug="hello-world", status="published")
        db.session.add(post)
        db.session.commit()
        return post.id


def login(client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, **headers):
    return client.post("/auth/login", json={"email": email, "password": password}, headers=headers)


def csrf_headers(client) -> dict:
    return {"X-CSRF-Token": client.get_cookie("csrf_token").value}


@pytest.fixture
def admin_client(client, admin_id):
    resp = login(client)
    assert resp.status_code == 200, resp.get_json()
    return client

# tests/conftest.py
import os
import pytest
from sqlalchemy.pool import StaticPool

# --- Force a safe test environment ---
os.environ["FLASK_ENV"] = "test"
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
# In-memory SQLite so no database server is needed in CI
os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
os.environ.pop("DATABASE_URL", None)

from wtfrent import create_app, db  # noqa: E402
from wtfrent.auth import USER_SESSION_KEY  # noqa: E402
from wtfrent.users import create_user  # noqa: E402

TEST_CONFIG = {
    "TESTING": True,
    "WTF_CSRF_ENABLED": False,
    "SQLALCHEMY_ENGINE_OPTIONS": {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    },
}


@pytest.fixture()
def app():
    application = create_app(TEST_CONFIG)
    with application.app_context():
        db.create_all()
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_user(app):
    """Create a user in its own app context and return its id."""

    def _make_user(username="renter", email=None, password="correct-horse"):
        with app.app_context():
            user = create_user(email or f"{username}@wtf.rent", password, username)
            return user.id

    return _make_user


@pytest.fixture()
def login_as(client):
    def _login_as(user_id, permanent=False):
        with client.session_transaction() as session:
            session[USER_SESSION_KEY] = user_id
            session.permanent = permanent

    return _login_as

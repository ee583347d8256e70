import pytest

from santapairs import create_app
from santapairs.extensions import db
from santapairs.security import ROLE_ADMIN, ROLE_PARTICIPANT, Identity, hash_password, issue_token

ADMIN_PASSWORD = "Santa2025!"
ADMIN_PASSWORD_HASH = hash_password(ADMIN_PASSWORD)
FAMILY = "north-pole"


@pytest.fixture
def make_app():
    """
    Builds apps on in-memory SQLite with tables created. No app context is left
    pushed, so each test-client request gets a fresh one (and a fresh current_user).
    """
    apps = []

    def make(**overrides):
        config = {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "SANTA_ADMIN_PASSWORD_HASH": ADMIN_PASSWORD_HASH,
            "SANTA_MULTI_TENANT": True,
            "SANTA_DERANGEMENT_FALLBACK": "raise",
            "LOG_PATH": None,
        }
        config.update(overrides)
        app = create_app(config)
        with app.app_context():
            db.create_all()
        apps.append(app)
        return app

    yield make

    for app in apps:
        with app.app_context():
            db.session.remove()
            db.drop_all()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def app_ctx(app):
    """For tests that call services directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers(app):
    with app.app_context():
        token = issue_token(Identity(name="admin", role=ROLE_ADMIN))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def participant_headers(app):
    def make(name, scope=FAMILY):
        with app.app_context():
            token = issue_token(Identity(name=name, role=ROLE_PARTICIPANT, scope=scope))
        return {"Authorization": f"Bearer {token}"}

    return make

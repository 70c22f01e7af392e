import pytest

from workoutlogger import create_app
from workoutlogger.extensions import db

TEST_SECRET = "test-signing-key-that-is-long-enough-for-hs256"
PASSWORD = "Secret123!"


@pytest.fixture
def app(monkeypatch):
    monkeypatch.delenv("JWT_KEY", raising=False)
    app = create_app("testing", {"JWT_SECRET_KEY": TEST_SECRET})
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield


def register(client, username, password=PASSWORD):
    return client.post("/api/auth/register", json={"username": username, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    """Register ``username`` and return headers carrying its token."""
    def _headers(username="alice"):
        response = register(client, username)
        assert response.status_code == 200, response.get_json()
        return bearer(response.get_json()["token"])
    return _headers

import pytest

from api import create_app


@pytest.fixture
def app():
    """Fresh app per test, backed by an in-memory SQLite database."""
    app = create_app("testing")
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return app.extensions["session_service"]


@pytest.fixture
def store(app):
    return app.extensions["account_store"]


@pytest.fixture
def tokens(app):
    return app.extensions["token_authority"]


@pytest.fixture
def register(client):
    def _register(email="a@x.com", name="A", password="password123", **extra):
        payload = {"email": email, "name": name, "password": password, **extra}
        return client.post("/api/v1/auth/register", json=payload)

    return _register


@pytest.fixture
def login(client):
    def _login(email="a@x.com", password="password123"):
        return client.post("/api/v1/auth/login", json={"email": email, "password": password})

    return _login


def bearer(token):
    return {"Authorization": f"Bearer {token}"}

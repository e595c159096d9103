import pytest
from fastapi.testclient import TestClient

from config import Settings
from db import InMemoryStore
from main import create_app
from seed import load_products


@pytest.fixture
def settings():
    return Settings(jwt_secret="test-secret", bcrypt_rounds=4)


@pytest.fixture
def store():
    return InMemoryStore(load_products())


@pytest.fixture
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register_and_login(client):
    """Register a user, log in and return the Authorization headers."""

    def _login(username="al", email="al@mail.com", password="pw123456"):
        res = client.post("/api/auth/register", json={"username": username, "email": email, "password": password})
        assert res.status_code == 201, res.text
        res = client.post("/api/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}

    return _login


@pytest.fixture
def auth_headers(register_and_login):
    return register_and_login()

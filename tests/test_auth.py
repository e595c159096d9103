from datetime import datetime, timedelta, timezone

import pytest

from auth import PasswordHasher, TokenService
from errors import AuthError


def test_register_returns_public_user(client):
    res = client.post("/api/auth/register", json={"username": "al", "email": "a@x.com", "password": "pw123456"})
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["user"] == {"id": 1, "username": "al", "email": "a@x.com"}
    assert "password" not in body["user"]


def test_register_duplicate_email(client):
    payload = {"username": "al", "email": "a@x.com", "password": "pw123456"}
    assert client.post("/api/auth/register", json=payload).status_code == 201

    res = client.post("/api/auth/register", json={**payload, "username": "other"})
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Email already registered"}


@pytest.mark.parametrize("payload", [
    {"email": "a@x.com", "password": "pw123456"},
    {"username": "al", "password": "pw123456"},
    {"username": "al", "email": "a@x.com"},
    {"username": "  ", "email": "a@x.com", "password": "pw123456"},
])
def test_register_missing_fields(client, payload):
    res = client.post("/api/auth/register", json=payload)
    assert res.status_code == 400
    assert res.json()["message"] == "Please provide username, email, and password"


def test_register_rejects_malformed_email(client):
    res = client.post("/api/auth/register", json={"username": "al", "email": "not-an-email", "password": "pw"})
    assert res.status_code == 400
    assert res.json()["success"] is False


def test_user_ids_are_sequential(client):
    ids = []
    for n in range(3):
        res = client.post("/api/auth/register",
                          json={"username": f"u{n}", "email": f"u{n}@mail.com", "password": "secret"})
        ids.append(res.json()["user"]["id"])
    assert ids == [1, 2, 3]


def test_login_returns_token(client, settings):
    client.post("/api/auth/register", json={"username": "al", "email": "a@x.com", "password": "pw123456"})
    res = client.post("/api/auth/login", json={"email": "a@x.com", "password": "pw123456"})
    assert res.status_code == 200
    body = res.json()
    assert body["user"]["username"] == "al"

    identity = TokenService.from_settings(settings).decode(body["token"])
    assert identity.id == 1
    assert identity.email == "a@x.com"


def test_login_failures_are_indistinguishable(client):
    client.post("/api/auth/register", json={"username": "al", "email": "a@x.com", "password": "pw123456"})

    unknown = client.post("/api/auth/login", json={"email": "nobody@x.com", "password": "pw123456"})
    wrong = client.post("/api/auth/login", json={"email": "a@x.com", "password": "nope"})

    assert unknown.status_code == wrong.status_code == 400
    assert unknown.json() == wrong.json() == {"success": False, "message": "Invalid email or password"}


def test_login_missing_fields(client):
    res = client.post("/api/auth/login", json={"email": "a@x.com"})
    assert res.status_code == 400
    assert res.json()["message"] == "Please provide email and password"


def test_protected_route_requires_token(client):
    res = client.get("/api/cart")
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Access denied. No token provided"}


def test_protected_route_rejects_bad_token(client):
    res = client.get("/api/cart", headers={"Authorization": "Bearer not.a.token"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid or expired token"


def test_protected_route_rejects_foreign_signature(client):
    token = TokenService("another-secret").create_access_token(1, "a@x.com")
    res = client.get("/api/orders", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_token_for_unknown_user_is_rejected(client, settings):
    token = TokenService.from_settings(settings).create_access_token(42, "ghost@x.com")
    res = client.get("/api/cart", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401
    assert res.json()["success"] is False


def test_expired_token_is_rejected(client, settings, register_and_login):
    register_and_login(email="a@x.com")
    tokens = TokenService.from_settings(settings)
    stale = tokens.create_access_token(1, "a@x.com", now=datetime.now(timezone.utc) - timedelta(hours=25))
    res = client.get("/api/cart", headers={"Authorization": f"Bearer {stale}"})
    assert res.status_code == 401


class TestTokenService:

    def test_round_trip_claims(self):
        tokens = TokenService("k", expire_hours=24)
        identity = tokens.decode(tokens.create_access_token(7, "x@y.com"))
        assert (identity.id, identity.email) == (7, "x@y.com")

    def test_expiry_is_enforced(self):
        tokens = TokenService("k", expire_hours=24)
        token = tokens.create_access_token(7, "x@y.com", now=datetime.now(timezone.utc) - timedelta(hours=24, minutes=1))
        with pytest.raises(AuthError):
            tokens.decode(token)

    def test_token_still_valid_before_expiry(self):
        tokens = TokenService("k", expire_hours=24)
        token = tokens.create_access_token(7, "x@y.com", now=datetime.now(timezone.utc) - timedelta(hours=23))
        assert tokens.decode(token).id == 7

    def test_wrong_secret(self):
        token = TokenService("k1").create_access_token(7, "x@y.com")
        with pytest.raises(AuthError) as exc_info:
            TokenService("k2").decode(token)
        assert exc_info.value.status_code == 401


class TestPasswordHasher:

    def test_hash_is_salted(self):
        hasher = PasswordHasher(rounds=4)
        first, second = hasher.hash("pw123456"), hasher.hash("pw123456")
        assert first != second
        assert "pw123456" not in first

    def test_verify(self):
        hasher = PasswordHasher(rounds=4)
        hashed = hasher.hash("pw123456")
        assert hasher.verify("pw123456", hashed)
        assert not hasher.verify("wrong", hashed)

    def test_verify_garbage_hash(self):
        assert PasswordHasher(rounds=4).verify("pw", "not-a-hash") is False

# tests/test_auth.py
import base64

import pytest
from passlib.hash import sha256_crypt
from sqlmodel import Session

from storefront.core.security import (
    decode_access_token,
    is_password_hash,
    legacy_sha256,
    plaintext_equals,
)
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.services import auth_service

repo = UserRepository()


def _register_body(**overrides):
    body = {
        "username": "alice",
        "password": "secret123",
        "confirm_password": "secret123",
        "first_name": "Alice",
        "last_name": "Smith",
        "email": "alice@example.com",
        "shipping_address": "1 Main Road",
    }
    body.update(overrides)
    return body


def _insert_user(engine, username: str, stored: str, role: str = "Customer") -> None:
    with Session(engine) as session:
        repo.create(session, User(username=username, password_hash=stored, role=role))


def _stored_value(engine, username: str) -> str:
    with Session(engine) as session:
        return repo.get_by_username(session, username).password_hash


def _login(client, username: str, password: str):
    return client.post("/store/auth/login", json={"username": username, "password": password})


def test_register_creates_user_and_customer(client, api, engine):
    r = client.post("/store/auth/register", json=_register_body())
    assert r.status_code == 201
    body = r.json()
    assert body["role"] == "Customer"
    assert body["token_type"] == "bearer"

    customer = api.get_customer_by_username("alice")
    assert customer is not None
    assert customer.email == "alice@example.com"
    assert body["customer_id"] == customer.row_key

    claims = decode_access_token(body["access_token"])
    assert claims["sub"] == "alice"
    assert claims["customer_id"] == customer.row_key

    stored = _stored_value(engine, "alice")
    assert stored != "secret123"
    assert is_password_hash(stored)


def test_register_duplicate_username(client):
    assert client.post("/store/auth/register", json=_register_body()).status_code == 201
    r = client.post("/store/auth/register", json=_register_body())
    assert r.status_code == 409
    assert r.json()["detail"] == "Username already exists."


def test_register_validation(client):
    assert client.post("/store/auth/register", json=_register_body(confirm_password="other")).status_code == 422
    assert client.post("/store/auth/register", json=_register_body(password="123")).status_code == 422
    assert client.post("/store/auth/register", json=_register_body(email="not-an-email")).status_code == 422


def test_admin_registration_disabled_by_default(client):
    r = client.post("/store/auth/register", json=_register_body(role="Admin"))
    assert r.status_code == 403


def test_admin_registration_when_allowed(client, api, monkeypatch):
    monkeypatch.setattr(auth_service.settings, "ALLOW_ADMIN_REGISTRATION", True)
    r = client.post("/store/auth/register", json=_register_body(username="boss", role="Admin"))
    assert r.status_code == 201
    assert r.json()["role"] == "Admin"
    assert r.json()["customer_id"] == "boss"
    assert api.get_customer_by_username("boss") is None


def test_login_and_me(client):
    client.post("/store/auth/register", json=_register_body())

    r = _login(client, "alice", "secret123")
    assert r.status_code == 200
    token = r.json()["access_token"]

    me = client.get("/store/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "alice"
    assert me.json()["role"] == "Customer"


@pytest.mark.parametrize("username,password", [("alice", "wrong-password"), ("nobody", "secret123")])
def test_bad_credentials(client, username, password):
    client.post("/store/auth/register", json=_register_body())
    r = _login(client, username, password)
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid username or password."


def test_login_without_customer_record_uses_username(client, engine):
    _insert_user(engine, "root", auth_service.hash_password("toor-toor"), role="Admin")
    r = _login(client, "root", "toor-toor")
    assert r.status_code == 200
    assert r.json()["customer_id"] == "root"


def test_plaintext_password_is_upgraded_on_login(client, engine):
    _insert_user(engine, "legacy", "plainpass")

    assert _login(client, "legacy", "plainpass").status_code == 200

    stored = _stored_value(engine, "legacy")
    assert is_password_hash(stored)
    assert not plaintext_equals("plainpass", stored)

    # the upgraded hash keeps working
    assert _login(client, "legacy", "plainpass").status_code == 200


def test_plaintext_login_refused_when_migration_disabled(client, engine, monkeypatch):
    monkeypatch.setattr(auth_service.settings, "LEGACY_PLAINTEXT_MIGRATION", False)
    _insert_user(engine, "legacy", "plainpass")

    assert _login(client, "legacy", "plainpass").status_code == 401
    assert _stored_value(engine, "legacy") == "plainpass"


def test_stored_digest_is_not_accepted_as_password(client, engine):
    digest = legacy_sha256("s3cret")
    _insert_user(engine, "old", digest)

    # sending the digest itself must not pass the plain-text fallback
    assert _login(client, "old", digest).status_code == 401


def test_digest_shaped_plaintext_needs_a_reset(client, engine):
    stored = base64.b64encode(b"x" * 32).decode("ascii")
    _insert_user(engine, "odd", stored)

    assert _login(client, "odd", stored).status_code == 401
    assert _stored_value(engine, "odd") == stored


def test_legacy_sha256_is_upgraded_on_login(client, engine):
    _insert_user(engine, "old", legacy_sha256("s3cret"))

    assert _login(client, "old", "s3cret").status_code == 200
    assert is_password_hash(_stored_value(engine, "old"))
    assert _login(client, "old", "s3cret").status_code == 200


def test_deprecated_scheme_is_rehashed(client, engine):
    _insert_user(engine, "dep", sha256_crypt.hash("s3cret"))

    assert _login(client, "dep", "s3cret").status_code == 200
    assert _stored_value(engine, "dep").startswith("$pbkdf2-sha256$")


def test_logout_clears_cart(client, customer_headers, make_product):
    lamp = make_product("Lamp")
    client.post("/store/cart/items", json={"productId": lamp.row_key}, headers=customer_headers)

    assert client.post("/store/auth/logout").status_code == 204
    assert client.get("/store/cart", headers=customer_headers).json()["items"] == []

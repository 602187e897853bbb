from datetime import timedelta
import time

import pytest

from medlearn.core.security import create_access_token, decode_token, user_id_from_token
from tests.conftest import API, register_and_login


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy"}


def test_register_and_me(client):
    headers = register_and_login(client)
    r = client.get(f"{API}/auth/me", headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["email"] == "student@example.com"
    assert body["role"] == "student"
    assert "hashed_password" not in body


def test_register_duplicate_email(client):
    register_and_login(client)
    r = client.post(
        f"{API}/auth/register",
        json={"name": "Someone", "email": "Student@Example.com", "password": "password123"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "User with this email already exists"}


def test_register_validation_error(client):
    r = client.post(f"{API}/auth/register", json={"name": "A", "email": "not-an-email", "password": "short"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    assert body["details"]


def test_login_wrong_password(client):
    register_and_login(client)
    r = client.post(f"{API}/auth/login", data={"username": "student@example.com", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json() == {"error": "Incorrect email or password"}


def test_session_cookie_authenticates_and_logout_clears_it(client):
    register_and_login(client)
    assert client.cookies.get("session_token")

    r = client.get(f"{API}/auth/me")
    assert r.status_code == 200

    r = client.post(f"{API}/auth/logout")
    assert r.status_code == 200
    assert "session_token=" in r.headers["set-cookie"]
    client.cookies.clear()

    r = client.get(f"{API}/auth/me")
    assert r.status_code == 401


def test_invalid_token_rejected(client):
    r = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}
    assert r.headers["www-authenticate"] == "Bearer"


@pytest.mark.parametrize("method,path", [
    ("get", "/users/profile"),
    ("post", "/users/profile/xp"),
    ("post", "/cases"),
    ("get", "/cases/saved"),
    ("get", "/quizzes"),
    ("get", "/flashcards"),
    ("get", "/flashcards/categories"),
    ("get", "/flashcards/sessions/stats"),
    ("post", "/ai/chat"),
    ("post", "/upload"),
])
def test_protected_routes_require_auth(client, method, path):
    r = getattr(client, method)(f"{API}{path}")
    assert r.status_code == 401
    assert r.json()["error"] == "Unauthorized"


def test_access_token_round_trip():
    token = create_access_token(42, role="admin")
    assert user_id_from_token(token) == 42
    assert decode_token(token)["role"] == "admin"

    expired = create_access_token(42, expires_delta=timedelta(seconds=-1))
    assert user_id_from_token(expired) is None
    assert user_id_from_token("garbage") is None


def test_token_timestamps_are_utc_epoch():
    now = int(time.time())
    claims = decode_token(create_access_token(7, expires_delta=timedelta(minutes=5)))
    assert abs(claims["iat"] - now) <= 5
    assert claims["exp"] - claims["iat"] == 300

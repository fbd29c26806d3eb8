# tests/test_api_auth.py

import pytest

from backend.auth import AuthService
from backend.errors import UserNotFound


def _register(client, **overrides):
    body = {"name": "John Doe", "email": "john@example.com", "password": "password123"}
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


def test_register_returns_201_with_token(client) -> None:
    resp = _register(client)

    assert resp.status_code == 201
    data = resp.json()
    assert data["email"] == "john@example.com"
    assert data["name"] == "John Doe"
    assert data["token"]


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"name": ""}, "name"),
        ({"name": "   "}, "name"),
        ({"email": "invalid-email"}, "email"),
        ({"password": "123"}, "password"),
    ],
)
def test_register_validation_errors_return_400(client, overrides, field) -> None:
    resp = _register(client, **overrides)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Validation failed"
    assert field in body["details"]


def test_register_existing_email_returns_400(client) -> None:
    assert _register(client).status_code == 201

    resp = _register(client, name="Someone Else")

    assert resp.status_code == 400
    assert resp.json() == {"error": "Email already exists"}


def test_login_returns_200_with_token(client) -> None:
    _register(client)

    resp = client.post("/api/auth/login", json={"email": "john@example.com", "password": "password123"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == "john@example.com"
    assert data["name"] == "John Doe"

    tasks = client.get("/api/tasks", headers={"Authorization": f"Bearer {data['token']}"})
    assert tasks.status_code == 200


def test_login_wrong_password_returns_401(client) -> None:
    _register(client)

    resp = client.post("/api/auth/login", json={"email": "john@example.com", "password": "wrong-password"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password"}


def test_login_unknown_email_returns_401(client) -> None:
    resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "password123"})
    assert resp.status_code == 401


@pytest.mark.parametrize(
    "body",
    [
        {"email": "", "password": "password123"},
        {"email": "john@example.com", "password": ""},
        {"email": "john@example.com"},
    ],
)
def test_login_validation_errors_return_400(client, body) -> None:
    resp = client.post("/api/auth/login", json=body)
    assert resp.status_code == 400


def test_login_inconsistent_store_returns_500(client, monkeypatch) -> None:
    def boom(self, email, password):
        raise UserNotFound(f"User not found: {email}")

    monkeypatch.setattr(AuthService, "login", boom)

    resp = client.post("/api/auth/login", json={"email": "john@example.com", "password": "password123"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_root_and_health(client) -> None:
    assert client.get("/").json() == {"message": "Task Tracker Test running"}

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["database"] == "✅ Connected & Working"

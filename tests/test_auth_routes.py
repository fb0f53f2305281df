from __future__ import annotations

import pytest

PROTECTED_ROUTES = [
    ("GET", "/api/tasks"),
    ("PATCH", "/api/tasks/1/toggle"),
    ("GET", "/api/gym/today"),
    ("GET", "/api/gym/2024-05-01"),
    ("POST", "/api/gym/log"),
    ("GET", "/api/gym/history"),
]


def test_login_returns_user_without_password_hash(client):
    response = client.post("/api/login", json={"username": "Sakthi", "password": "Sakthi@123"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["username"] == "Sakthi"
    assert isinstance(body["id"], int)
    assert "password" not in body and "password_hash" not in body


def test_login_accepts_form_data(client):
    response = client.post("/api/login", data={"username": "Sakthi", "password": "Sakthi@123"})

    assert response.status_code == 200


def test_login_rejects_bad_password(client):
    response = client.post("/api/login", json={"username": "Sakthi", "password": "nope"})

    assert response.status_code == 401
    assert response.get_json() == {"message": "Invalid username or password"}


def test_login_rejects_unknown_user(client):
    response = client.post("/api/login", json={"username": "Nobody", "password": "Sakthi@123"})

    assert response.status_code == 401


def test_login_is_case_sensitive(client):
    response = client.post("/api/login", json={"username": "sakthi", "password": "Sakthi@123"})

    assert response.status_code == 401


def test_login_requires_both_fields(client):
    response = client.post("/api/login", json={"username": "Sakthi"})

    assert response.status_code == 400
    assert response.get_json()["field"] == "password"


def test_current_user_and_logout(auth_client):
    me = auth_client.get("/api/user")
    assert me.status_code == 200
    assert me.get_json()["username"] == "Sakthi"

    logout = auth_client.post("/api/logout")
    assert logout.status_code == 200
    assert logout.get_json() == {"message": "Logged out"}

    after = auth_client.get("/api/user")
    assert after.status_code == 401
    assert "message" in after.get_json()


@pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
def test_protected_routes_require_session(client, method, path):
    response = client.open(path, method=method, json={})

    assert response.status_code == 401
    assert response.get_json() == {"message": "Unauthorized"}


def test_session_for_deleted_user_is_rejected(client):
    with client.session_transaction() as flask_session:
        flask_session["user"] = {"id": 4242, "username": "ghost"}

    response = client.get("/api/tasks")

    assert response.status_code == 401
    with client.session_transaction() as flask_session:
        assert "user" not in flask_session


def test_health_is_public(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"username": 123, "password": "Sakthi@123"}, "username"),
        ({"username": ["Sakthi"], "password": "Sakthi@123"}, "username"),
        ({"username": "Sakthi", "password": 123}, "password"),
    ],
)
def test_login_rejects_non_string_credentials(client, payload, field):
    response = client.post("/api/login", json=payload)

    assert response.status_code == 400
    body = response.get_json()
    assert body["field"] == field
    assert "message" in body


def test_unknown_routes_return_json(client):
    for method, path in (("get", "/api/nope"), ("patch", "/api/tasks/abc/toggle")):
        response = getattr(client, method)(path)

        assert response.status_code == 404
        assert response.is_json
        assert "message" in response.get_json()


def test_wrong_method_returns_json(client):
    response = client.get("/api/login")

    assert response.status_code == 405
    assert "message" in response.get_json()

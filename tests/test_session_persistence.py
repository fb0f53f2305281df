from __future__ import annotations

from http.cookies import SimpleCookie

import pytest

from daily_planner import create_app


@pytest.fixture
def sqlite_db_url(tmp_path, monkeypatch):
    db_path = tmp_path / "session.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.setenv("FLASK_SECRET_KEY", "testing-secret")
    monkeypatch.setenv("FLASK_ENV", "development")
    monkeypatch.setenv("SESSION_COOKIE_SECURE", "1")
    monkeypatch.setenv("SESSION_COOKIE_SAMESITE", "Lax")
    monkeypatch.setenv("SESSION_COOKIE_DOMAIN", "localhost")
    monkeypatch.setenv("SESSION_COOKIE_NAME", "planner_session")
    yield f"sqlite:///{db_path}"


def _extract_cookie(response, name: str) -> SimpleCookie | None:
    header = response.headers.get("Set-Cookie")
    if not header:
        return None
    cookie = SimpleCookie()
    cookie.load(header)
    return cookie.get(name)


def test_session_survives_restart(sqlite_db_url):
    # First app instance simulates the original process.
    app_one = create_app()
    client_one = app_one.test_client()

    login_response = client_one.post(
        "/api/login", json={"username": "Sakthi", "password": "Sakthi@123"}
    )
    assert login_response.status_code == 200

    cookie = _extract_cookie(login_response, "planner_session")
    assert cookie is not None
    assert "Secure" in cookie.output()
    assert "SameSite=Lax" in cookie.output()
    assert "HttpOnly" in cookie.output()

    assert client_one.get("/api/user").status_code == 200

    # A brand new process reading the same database recognises the session.
    app_two = create_app()
    client_two = app_two.test_client()
    client_two.set_cookie(
        key="planner_session",
        value=cookie.value,
        domain="localhost",
        path=cookie["path"] or "/",
    )

    second_response = client_two.get("/api/user")
    assert second_response.status_code == 200
    assert second_response.get_json()["username"] == "Sakthi"


def test_logout_invalidates_server_side_session(sqlite_db_url):
    app = create_app()
    client = app.test_client()
    client.post("/api/login", json={"username": "Sakthi", "password": "Sakthi@123"})

    client.post("/api/logout")

    assert client.get("/api/tasks").status_code == 401

from __future__ import annotations

import pytest

from daily_planner import create_app

DEMO_USERNAME = "Sakthi"
DEMO_PASSWORD = "Sakthi@123"


def build_test_app(db_path, **overrides):
    config = {
        "TESTING": True,
        "SECRET_KEY": "testing-secret",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        "DEMO_USERNAME": DEMO_USERNAME,
        "DEMO_PASSWORD": DEMO_PASSWORD,
        "SEED_ON_STARTUP": True,
        "APP_TIMEZONE": None,
    }
    config.update(overrides)
    return create_app(config)


@pytest.fixture
def app(tmp_path):
    application = build_test_app(tmp_path / "planner.db")
    with application.app_context():
        yield application


@pytest.fixture
def storage(app):
    return app.storage_service


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    response = client.post(
        "/api/login", json={"username": DEMO_USERNAME, "password": DEMO_PASSWORD}
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def frozen_today(monkeypatch):
    """Pin the planner's notion of "today"; call the returned setter to move it."""

    import daily_planner.utils.dates as dates_module

    state = {"today": "2024-05-01"}
    monkeypatch.setattr(dates_module, "today_iso", lambda: state["today"])

    def set_today(value: str) -> None:
        state["today"] = value

    return set_today


@pytest.fixture
def make_app(tmp_path):
    """Build an extra app on its own database file with config overrides."""

    def factory(name: str = "extra.db", **overrides):
        return build_test_app(tmp_path / name, **overrides)

    return factory

"""Flask application factory."""

import logging
import os
import secrets
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping, Optional

import click
from dotenv import load_dotenv
from flask import Flask
from flask_session import Session
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .services.storage_service import StorageService

logger = logging.getLogger(__name__)


def _resolve_secret_key() -> str:
    """Return a secret key for Flask sessions.

    In production we expect ``FLASK_SECRET_KEY`` (or the legacy ``SECRET_KEY``)
    to be configured. When the environment variable is missing, such as during
    local testing, we generate a temporary key to avoid crashing at import time.
    """

    for name in ("FLASK_SECRET_KEY", "SECRET_KEY"):
        value = os.environ.get(name)
        if value:
            return value

    return secrets.token_hex(32)


def _bool_from_env(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _resolve_database_uri(app: Flask, is_production: bool) -> str:
    """Return the database URI configured for the application."""

    database_uri = os.environ.get("DATABASE_URL")
    if not database_uri:
        if is_production:
            raise RuntimeError("DATABASE_URL is required in production.")
        default_sqlite_path = Path(app.instance_path) / "daily_planner.db"
        database_uri = os.environ.get(
            "LOCAL_DATABASE_URI",
            f"sqlite:///{default_sqlite_path}",
        )

    if database_uri.startswith("sqlite:///"):
        sqlite_path = database_uri.replace("sqlite:///", "", 1)
        if sqlite_path and sqlite_path != ":memory:":
            Path(sqlite_path).expanduser().parent.mkdir(parents=True, exist_ok=True)

    sslmode = os.environ.get("DATABASE_SSLMODE")
    if sslmode and "sslmode=" not in database_uri:
        separator = "&" if "?" in database_uri else "?"
        database_uri = f"{database_uri}{separator}sslmode={sslmode}"

    return database_uri


def _configure_logging() -> None:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Configure and return the Flask application."""

    load_dotenv()
    _configure_logging()

    app = Flask(__name__)

    flask_env = os.environ.get("FLASK_ENV", "").lower()
    is_production = flask_env in {"production", "prod"}

    app.config["SECRET_KEY"] = _resolve_secret_key()

    # --- Session configuration -----------------------------------------
    same_site_env = os.environ.get("SESSION_COOKIE_SAMESITE")
    same_site_default = "Lax"
    if same_site_env and same_site_env.lower() == "none":
        same_site_default = "None"

    app.config.update(
        SESSION_TYPE=os.environ.get("SESSION_TYPE", "sqlalchemy"),
        SESSION_SQLALCHEMY=db,
        SESSION_SQLALCHEMY_TABLE=os.environ.get("SESSION_TABLE", "sessions"),
        SESSION_PERMANENT=True,
        PERMANENT_SESSION_LIFETIME=timedelta(
            days=int(os.environ.get("SESSION_LIFETIME_DAYS", "14"))
        ),
        SESSION_COOKIE_SECURE=_bool_from_env("SESSION_COOKIE_SECURE", is_production),
        SESSION_COOKIE_SAMESITE=os.environ.get("SESSION_COOKIE_SAMESITE", same_site_default),
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_NAME=os.environ.get("SESSION_COOKIE_NAME", "daily_planner_session"),
        SESSION_COOKIE_DOMAIN=os.environ.get("SESSION_COOKIE_DOMAIN"),
    )

    # --- Planner configuration ------------------------------------------
    app.config.update(
        DEMO_USERNAME=os.environ.get("DEMO_USERNAME", "Sakthi"),
        DEMO_PASSWORD=os.environ.get("DEMO_PASSWORD", "Sakthi@123"),
        SEED_ON_STARTUP=_bool_from_env("SEED_ON_STARTUP", True),
        APP_TIMEZONE=os.environ.get("APP_TIMEZONE"),
    )

    if test_config is None or "SQLALCHEMY_DATABASE_URI" not in test_config:
        app.config["SQLALCHEMY_DATABASE_URI"] = _resolve_database_uri(app, is_production)
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {"pool_pre_ping": True}
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)

    if test_config is not None:
        app.config.update(test_config)

    # Ensure models are registered with SQLAlchemy before any table creation.
    from . import models  # noqa: F401

    db.init_app(app)

    if is_production:
        try:
            with app.app_context():
                connection = db.engine.connect()
                connection.close()
        except SQLAlchemyError as exc:  # pragma: no cover - network dependent
            raise RuntimeError("Database connectivity failed for session storage") from exc

    # Flask-Session registers its own table on the shared metadata; drop any
    # definition left behind by a previous app instance in this process.
    table_name = app.config["SESSION_SQLALCHEMY_TABLE"]
    if table_name in db.metadata.tables:
        db.metadata.remove(db.metadata.tables[table_name])

    Session(app)

    app.storage_service = StorageService(db.session)

    with app.app_context():
        db.create_all()
        if app.config["SEED_ON_STARTUP"]:
            from .services.seed import seed_all

            seed_all(
                app.storage_service,
                app.config["DEMO_USERNAME"],
                app.config["DEMO_PASSWORD"],
            )

    from .routes import main_bp

    app.register_blueprint(main_bp)

    @app.cli.command("seed")
    def seed_command() -> None:
        """Create the demo user and the default tasks when missing."""

        from .services.seed import seed_all

        summary = seed_all(
            app.storage_service,
            app.config["DEMO_USERNAME"],
            app.config["DEMO_PASSWORD"],
        )
        click.echo(
            f"user created: {summary['user_created']}, tasks created: {summary['tasks_created']}"
        )

    logger.info("app.created", extra={"database": app.config["SQLALCHEMY_DATABASE_URI"].split(":", 1)[0]})
    return app

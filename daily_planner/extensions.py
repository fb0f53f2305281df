"""Application-wide Flask extensions."""

from flask_sqlalchemy import SQLAlchemy


# A single SQLAlchemy handle shared across the application. The engine is
# configured in :func:`daily_planner.create_app` from the environment, and the
# same handle backs the server-side session table.
db = SQLAlchemy()

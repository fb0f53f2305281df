"""Authentication helpers for the planner API."""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Any, Dict, Optional

from flask import current_app, g, session
from werkzeug.security import check_password_hash, generate_password_hash


@dataclass
class AuthError(Exception):
    """Raised when a request is not authenticated."""

    message: str
    status_code: int = 401

    def __str__(self) -> str:  # pragma: no cover - dataclass convenience
        return self.message


def hash_password(password: str) -> str:
    """Return a salted, irreversible hash for ``password``."""

    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)


def session_user() -> Optional[Dict[str, Any]]:
    """Return the user stored on the session, revalidated against storage.

    A session that points at a user which no longer exists is cleared.
    """

    user: Optional[Dict[str, Any]] = session.get("user")
    if not user or "id" not in user:
        return None

    record = current_app.storage_service.get_user(user["id"])
    if record is None:
        session.clear()
        return None
    return record.to_dict()


def login_required(view):
    """Decorator rejecting unauthenticated API calls with :class:`AuthError`."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        user = session_user()
        if user is None:
            raise AuthError("Unauthorized")
        g.user = user
        return view(*args, **kwargs)

    return wrapped

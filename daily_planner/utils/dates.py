"""Calendar helpers shared by the task and gym services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


@dataclass
class InvalidDateError(Exception):
    """Raised when a calendar date string is not ``YYYY-MM-DD``."""

    value: str
    field: str = "date"

    def __str__(self) -> str:  # pragma: no cover - dataclass convenience
        return f"Invalid date '{self.value}'. Expected YYYY-MM-DD."


def _configured_zone() -> Optional[ZoneInfo]:
    if not has_app_context():
        return None
    name = current_app.config.get("APP_TIMEZONE")
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning("dates.unknown_timezone", extra={"timezone": name})
        return None


def now() -> datetime:
    """Return the current timezone-aware timestamp."""

    return datetime.now(timezone.utc)


def today_iso() -> str:
    """Return today's calendar date as ``YYYY-MM-DD``.

    Uses ``APP_TIMEZONE`` when configured, otherwise the server's local date.
    """

    zone = _configured_zone()
    if zone is not None:
        return datetime.now(zone).date().isoformat()
    return date.today().isoformat()


def parse_date(value: Optional[str], field: str = "date") -> str:
    """Validate ``value`` and return it in canonical ``YYYY-MM-DD`` form."""

    if not value or not isinstance(value, str):
        raise InvalidDateError(str(value), field)
    try:
        parsed = datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidDateError(value, field) from exc
    return parsed.isoformat()

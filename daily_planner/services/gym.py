"""Gym log rules: one record per calendar date, replaced wholesale on update."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..models import serialize_gym_log
from .storage_service import StorageService

logger = logging.getLogger(__name__)

PLACEHOLDER_REPS = (12, 10, 8)


@dataclass
class GymLogValidationError(Exception):
    """Raised when a gym log payload does not match the expected shape."""

    field: str
    message: str

    def __str__(self) -> str:  # pragma: no cover - dataclass convenience
        return f"Validation error for {self.field}: {self.message}"


def default_gym_log(date: str) -> Dict[str, Any]:
    """Renderable structure for a date without a record. Never persisted."""

    def placeholder_sets() -> List[Dict[str, Any]]:
        return [{"completed": False, "reps": reps} for reps in PLACEHOLDER_REPS]

    return serialize_gym_log(
        log_id=0,
        date=date,
        pushups_count=0,
        biceps_sets=placeholder_sets(),
        shoulder_sets=placeholder_sets(),
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _normalize_sets(field: str, value: Any) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise GymLogValidationError(field, "must be a list of sets")

    normalized: List[Dict[str, Any]] = []
    for index, entry in enumerate(value):
        if not isinstance(entry, Mapping):
            raise GymLogValidationError(f"{field}[{index}]", "must be an object")
        completed = entry.get("completed", False)
        reps = entry.get("reps", 0)
        if not isinstance(completed, bool):
            raise GymLogValidationError(f"{field}[{index}].completed", "must be a boolean")
        if not _is_int(reps) or reps < 0:
            raise GymLogValidationError(f"{field}[{index}].reps", "must be a non-negative integer")
        normalized.append({"completed": completed, "reps": reps})
    return normalized


def normalize_gym_payload(payload: Any) -> Dict[str, Any]:
    """Validate a request body and return storage-ready fields.

    Missing values default to zero push-ups and empty set lists.
    """

    if not isinstance(payload, Mapping):
        raise GymLogValidationError("body", "must be a JSON object")

    pushups = payload.get("pushupsCount")
    if pushups is None:
        pushups = 0
    if not _is_int(pushups) or pushups < 0:
        raise GymLogValidationError("pushupsCount", "must be a non-negative integer")

    return {
        "pushups_count": pushups,
        "biceps_sets": _normalize_sets("bicepsSets", payload.get("bicepsSets")),
        "shoulder_sets": _normalize_sets("shoulderSets", payload.get("shoulderSets")),
    }


def get_gym_log_or_default(storage: StorageService, date: str) -> Dict[str, Any]:
    log = storage.get_gym_log(date)
    if log is None:
        return default_gym_log(date)
    return log.to_dict()


def upsert_gym_log(storage: StorageService, date: str, payload: Any) -> Dict[str, Any]:
    """Create or replace the log for ``date`` with the payload's fields."""

    fields = normalize_gym_payload(payload)

    with storage.transaction():
        existing = storage.get_gym_log(date, for_update=True)
        if existing is not None:
            log = storage.update_gym_log(existing, fields)
            created = False
        else:
            log = storage.create_gym_log(date, fields)
            created = True
        result = log.to_dict()

    logger.info(
        "gym.log_saved",
        extra={"date": date, "created": created, "pushups": fields["pushups_count"]},
    )
    return result


def gym_history(
    storage: StorageService,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> List[Dict[str, Any]]:
    return [log.to_dict() for log in storage.list_gym_logs(start, end)]

"""Bootstrap data: the demo login and the default daily tasks."""

from __future__ import annotations

import logging
from typing import Dict

from ..utils.auth import hash_password
from .storage_service import StorageService

logger = logging.getLogger(__name__)

DEFAULT_TASK_TITLES = (
    "GCP Certification",
    "DevOps Practice",
    "Learn C#",
    "Unity",
    "Unreal Engine",
    "Gym Workout",
)


def seed_demo_user(storage: StorageService, username: str, password: str) -> bool:
    """Create ``username`` with a hashed password unless it already exists."""

    if storage.get_user_by_username(username) is not None:
        return False

    with storage.transaction():
        storage.create_user(username, hash_password(password))
    logger.info("seed.user_created", extra={"username": username})
    return True


def seed_default_tasks(storage: StorageService) -> int:
    """Insert the system tasks when no task exists at all."""

    if storage.count_tasks() > 0:
        return 0

    with storage.transaction():
        for title in DEFAULT_TASK_TITLES:
            storage.create_task(title, is_system=True)
    logger.info("seed.tasks_created", extra={"count": len(DEFAULT_TASK_TITLES)})
    return len(DEFAULT_TASK_TITLES)


def seed_all(storage: StorageService, username: str, password: str) -> Dict[str, int]:
    return {
        "user_created": int(seed_demo_user(storage, username, password)),
        "tasks_created": seed_default_tasks(storage),
    }

"""Daily task reset and streak rules."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, NamedTuple, Optional, Tuple

from ..models import Task
from ..utils import dates
from .storage_service import StorageService

logger = logging.getLogger(__name__)


class TaskNotFoundError(Exception):
    """Raised when a task id does not reference an existing task."""

    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class TaskState(NamedTuple):
    completed: bool
    streak: int
    last_completed_at: Optional[datetime]


def needs_daily_reset(marker: Optional[str], today: str) -> bool:
    """Return ``True`` when tasks have not been reset yet for ``today``."""

    return marker != today


def next_task_state(
    completed: bool,
    streak: int,
    last_completed_at: Optional[datetime],
    now: datetime,
) -> TaskState:
    """Flip ``completed`` and move the streak one step.

    Completing adds one and stamps ``now``. Uncompleting subtracts one,
    never going below zero, and keeps the previous completion timestamp.
    """

    if not completed:
        return TaskState(True, (streak or 0) + 1, now)
    return TaskState(False, max(0, (streak or 0) - 1), last_completed_at)


def reset_tasks_if_new_day(
    storage: StorageService,
    user_id: int,
    today: str,
    marker: Optional[str] = None,
) -> Tuple[str, bool]:
    """Clear completion flags when the session has not seen ``today`` yet.

    ``marker`` is the session's last reset date; a missing marker (new
    session) counts as not reset. Streaks and completion timestamps are left
    alone. The date is also recorded on the user row.

    Returns the marker now in effect and whether this call reset the tasks.
    """

    if not needs_daily_reset(marker, today):
        return today, False

    with storage.transaction():
        reset_count = storage.reset_all_tasks()
        storage.record_daily_reset(user_id, today)

    logger.info(
        "tasks.daily_reset",
        extra={"user_id": user_id, "date": today, "previous": marker, "tasks": reset_count},
    )
    return today, True


def list_tasks(storage: StorageService) -> List[Task]:
    return storage.list_tasks()


def toggle_task(
    storage: StorageService,
    task_id: int,
    now: Optional[datetime] = None,
) -> Task:
    """Flip a task's completion and adjust its streak in one transaction."""

    timestamp = now or dates.now()
    with storage.transaction():
        task = storage.get_task(task_id, for_update=True)
        if task is None:
            raise TaskNotFoundError(task_id)

        state = next_task_state(task.completed, task.streak, task.last_completed_at, timestamp)
        task.completed = state.completed
        task.streak = state.streak
        task.last_completed_at = state.last_completed_at

    logger.info(
        "tasks.toggled",
        extra={"task_id": task_id, "completed": task.completed, "streak": task.streak},
    )
    return task

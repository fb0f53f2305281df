from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from ..models import GymLog, Task, User

logger = logging.getLogger(__name__)


class StorageService:
    """Relational persistence for users, tasks and gym logs.

    Methods only stage changes on the session; callers decide when to commit,
    usually through :meth:`transaction`.
    """

    def __init__(self, session) -> None:
        self._session = session

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Commit on success, roll back and re-raise on any failure."""

        try:
            yield self._session
            self._session.commit()
        except SQLAlchemyError:
            logger.warning("storage.transaction.rollback", exc_info=True)
            self._session.rollback()
            raise
        except Exception:
            self._session.rollback()
            raise

    def rollback(self) -> None:
        self._session.rollback()

    # --- Users -----------------------------------------------------------

    def get_user(self, user_id: int) -> Optional[User]:
        return self._session.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._session.execute(
            select(User).where(User.username == username)
        ).scalar_one_or_none()

    def create_user(self, username: str, password_hash: str) -> User:
        user = User(username=username, password_hash=password_hash)
        self._session.add(user)
        self._session.flush()
        return user

    def record_daily_reset(self, user_id: int, today: str) -> None:
        """Store ``today`` as the date of the user's most recent task reset."""

        self._session.execute(
            update(User)
            .where(User.id == user_id)
            .values(last_reset_date=today)
            .execution_options(synchronize_session="fetch")
        )

    # --- Tasks -----------------------------------------------------------

    def list_tasks(self) -> List[Task]:
        return list(self._session.execute(select(Task).order_by(Task.id)).scalars())

    def count_tasks(self) -> int:
        return self._session.execute(select(func.count(Task.id))).scalar_one()

    def get_task(self, task_id: int, for_update: bool = False) -> Optional[Task]:
        stmt = select(Task).where(Task.id == task_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalar_one_or_none()

    def create_task(self, title: str, is_system: bool = False) -> Task:
        task = Task(title=title, is_system=is_system, completed=False, streak=0)
        self._session.add(task)
        self._session.flush()
        return task

    def reset_all_tasks(self) -> int:
        """Clear the ``completed`` flag on every task; return rows touched."""

        result = self._session.execute(
            update(Task)
            .values(completed=False)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    # --- Gym logs --------------------------------------------------------

    def get_gym_log(self, date: str, for_update: bool = False) -> Optional[GymLog]:
        stmt = select(GymLog).where(GymLog.date == date)
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalar_one_or_none()

    def list_gym_logs(self, start: Optional[str] = None, end: Optional[str] = None) -> List[GymLog]:
        stmt = select(GymLog)
        if start:
            stmt = stmt.where(GymLog.date >= start)
        if end:
            stmt = stmt.where(GymLog.date <= end)
        return list(self._session.execute(stmt.order_by(GymLog.date)).scalars())

    def create_gym_log(self, date: str, fields: Dict[str, Any]) -> GymLog:
        log = GymLog(
            date=date,
            pushups_count=fields["pushups_count"],
            biceps_sets=fields["biceps_sets"],
            shoulder_sets=fields["shoulder_sets"],
        )
        self._session.add(log)
        self._session.flush()
        return log

    def update_gym_log(self, log: GymLog, fields: Dict[str, Any]) -> GymLog:
        log.pushups_count = fields["pushups_count"]
        log.biceps_sets = fields["biceps_sets"]
        log.shoulder_sets = fields["shoulder_sets"]
        self._session.flush()
        return log

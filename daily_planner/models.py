"""Database models for the daily planner."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.sql import func

from .extensions import db


class User(db.Model):
    """Login identity. Tasks and gym logs are not scoped per user."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    # YYYY-MM-DD of the last daily task reset performed for this user.
    last_reset_date = db.Column(db.String(10), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username}


class Task(db.Model):
    __tablename__ = "tasks"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    completed = db.Column(db.Boolean, default=False, nullable=False)
    streak = db.Column(db.Integer, default=0, nullable=False)
    last_completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    is_system = db.Column(db.Boolean, default=False, nullable=False)

    __table_args__ = (db.CheckConstraint("streak >= 0", name="ck_tasks_streak_non_negative"),)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": bool(self.completed),
            "streak": self.streak or 0,
            "lastCompletedAt": _isoformat(self.last_completed_at),
            "isSystem": bool(self.is_system),
        }


class GymLog(db.Model):
    """One row per calendar date; set lists are kept as JSON."""

    __tablename__ = "gym_logs"

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.String(10), unique=True, nullable=False, index=True)
    pushups_count = db.Column(db.Integer, default=0, nullable=False)
    biceps_sets = db.Column(db.JSON, nullable=False, default=list)
    shoulder_sets = db.Column(db.JSON, nullable=False, default=list)

    def to_dict(self) -> Dict[str, Any]:
        return serialize_gym_log(
            log_id=self.id,
            date=self.date,
            pushups_count=self.pushups_count or 0,
            biceps_sets=list(self.biceps_sets or []),
            shoulder_sets=list(self.shoulder_sets or []),
        )


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def completion_percentage(
    biceps_sets: Optional[List[Mapping[str, Any]]],
    shoulder_sets: Optional[List[Mapping[str, Any]]],
) -> float:
    """Share of completed sets across both groups, 0-100.

    A log without any sets counts as 0 percent.
    """

    all_sets = list(biceps_sets or []) + list(shoulder_sets or [])
    if not all_sets:
        return 0.0
    completed = sum(1 for entry in all_sets if entry.get("completed"))
    return completed / len(all_sets) * 100


def serialize_gym_log(
    log_id: int,
    date: str,
    pushups_count: int,
    biceps_sets: List[Dict[str, Any]],
    shoulder_sets: List[Dict[str, Any]],
) -> Dict[str, Any]:
    return {
        "id": log_id,
        "date": date,
        "pushupsCount": pushups_count,
        "bicepsSets": biceps_sets,
        "shoulderSets": shoulder_sets,
        "completionPercentage": completion_percentage(biceps_sets, shoulder_sets),
    }

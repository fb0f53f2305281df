"""Seed the planner database with demo gym history.

This script fills ``gym_logs`` with plausible entries for the last few weeks
so the history calendar has something to render immediately. Existing logs
for a date are replaced.

Usage:
    DATABASE_URL=... python scripts/seed_gym_history.py

``SEED_DAYS`` controls how many days back to cover (default 28) and
``SEED_SKIP_RATE`` the share of days left without a record (default 0.25).
"""
from __future__ import annotations

import os
import random
import sys
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from daily_planner import create_app  # noqa: E402
from daily_planner.services.gym import PLACEHOLDER_REPS, upsert_gym_log  # noqa: E402


@dataclass
class SeedConfig:
    days: int = 28
    skip_rate: float = 0.25


def _resolve_config() -> SeedConfig:
    load_dotenv()
    try:
        days = int(os.getenv("SEED_DAYS", "28"))
        skip_rate = float(os.getenv("SEED_SKIP_RATE", "0.25"))
    except ValueError as exc:
        raise SystemExit(f"Invalid seed configuration: {exc}") from exc
    return SeedConfig(days=days, skip_rate=min(max(skip_rate, 0.0), 1.0))


def _random_sets() -> List[Dict[str, Any]]:
    return [{"completed": random.random() < 0.7, "reps": reps} for reps in PLACEHOLDER_REPS]


def _date_window(days: int) -> List[str]:
    today = date.today()
    return [(today - timedelta(days=offset)).isoformat() for offset in range(1, days + 1)]


def main() -> None:
    config = _resolve_config()
    app = create_app()

    written = 0
    with app.app_context():
        for day in _date_window(config.days):
            if random.random() < config.skip_rate:
                continue
            upsert_gym_log(
                app.storage_service,
                day,
                {
                    "pushupsCount": random.randint(10, 80),
                    "bicepsSets": _random_sets(),
                    "shoulderSets": _random_sets(),
                },
            )
            written += 1

    print(f"Seeded {written} gym logs over the last {config.days} days.")


if __name__ == "__main__":
    main()

from __future__ import annotations

from daily_planner.services.seed import DEFAULT_TASK_TITLES, seed_all, seed_default_tasks, seed_demo_user
from daily_planner.utils.auth import verify_password


def test_startup_seed_creates_user_with_hashed_password(storage):
    user = storage.get_user_by_username("Sakthi")

    assert user is not None
    assert user.password_hash != "Sakthi@123"
    assert verify_password(user.password_hash, "Sakthi@123")
    assert not verify_password(user.password_hash, "wrong")


def test_seeding_is_idempotent(storage):
    summary = seed_all(storage, "Sakthi", "Sakthi@123")

    assert summary == {"user_created": 0, "tasks_created": 0}
    assert storage.count_tasks() == len(DEFAULT_TASK_TITLES)


def test_any_existing_task_skips_default_tasks(make_app):
    app = make_app("custom.db", SEED_ON_STARTUP=False)
    with app.app_context():
        storage = app.storage_service
        with storage.transaction():
            storage.create_task("Read a book")

        assert seed_default_tasks(storage) == 0
        assert [task.title for task in storage.list_tasks()] == ["Read a book"]


def test_usernames_are_case_sensitive(storage):
    assert seed_demo_user(storage, "sakthi", "another-pass") is True
    assert storage.get_user_by_username("sakthi").id != storage.get_user_by_username("Sakthi").id

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from todo_app.domain.entities import TaskEntity
from todo_app.infra.db import init_db
from todo_app.infra.repository import LoadStatus, TaskRepository
from todo_app.infra.storage import LocalStorage
from todo_app.services.task_service import TaskService

TASKS_KEY = "advanced_todo_v1"
THEME_KEY = "dark_mode_v1"


@pytest.fixture()
def storage(tmp_path: Path) -> LocalStorage:
    engine = create_engine(f"sqlite:///{tmp_path / 'nested' / 'todo.sqlite3'}")
    init_db(engine)
    yield LocalStorage(sessionmaker(bind=engine, autoflush=False, autocommit=False))
    engine.dispose()


@pytest.fixture()
def repo(storage: LocalStorage) -> TaskRepository:
    return TaskRepository(storage, tasks_key=TASKS_KEY, theme_key=THEME_KEY)


class BrokenStorage:
    def get_item(self, key: str):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    def set_item(self, key: str, value: str) -> None:
        raise OperationalError("INSERT", {}, Exception("database is locked"))


TASKS = [
    TaskEntity(id="a", text="A", priority="High", date="2024-01-01", completed=False, category="Work"),
    TaskEntity(id="b", text="B", priority="Low", date="2024-01-02", completed=True, category="Home"),
]


def test_storage_set_then_overwrite(storage: LocalStorage) -> None:
    assert storage.get_item("key") is None

    storage.set_item("key", "one")
    storage.set_item("key", "two")
    assert storage.get_item("key") == "two"


def test_missing_tasks_are_absent(repo: TaskRepository) -> None:
    result = repo.load_tasks()

    assert result.status == LoadStatus.ABSENT
    assert result.tasks == []


def test_round_trip_preserves_order_and_fields(repo: TaskRepository) -> None:
    assert repo.save_tasks(TASKS) is True

    loaded = repo.load_tasks()
    assert loaded.ok
    assert loaded.tasks == TASKS

    repo.save_tasks(loaded.tasks)
    assert repo.load_tasks().tasks == TASKS


def test_saved_payload_shape(repo: TaskRepository, storage: LocalStorage) -> None:
    repo.save_tasks(TASKS[:1])

    assert json.loads(storage.get_item(TASKS_KEY)) == [
        {
            "id": "a",
            "text": "A",
            "priority": "High",
            "date": "2024-01-01",
            "completed": False,
            "category": "Work",
        }
    ]


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        json.dumps({"id": "a"}),
        json.dumps(["a string"]),
        json.dumps([{"text": "no id", "date": "2024-01-01"}]),
        json.dumps([{"id": "a", "text": "A", "date": "2024-01-01", "completed": "yes"}]),
        json.dumps([{"id": "a", "text": "   ", "date": "2024-01-01"}]),
        json.dumps([{"id": "a", "text": "A", "date": "2024-1-5"}]),
        json.dumps([{"id": "a", "text": "A", "date": "20240105"}]),
        json.dumps([{"id": "a", "text": "A", "date": "next friday"}]),
    ],
)
def test_unreadable_tasks_are_corrupt(repo: TaskRepository, storage: LocalStorage, payload: str) -> None:
    storage.set_item(TASKS_KEY, payload)

    assert repo.load_tasks().status == LoadStatus.CORRUPT


def test_missing_optional_fields_get_defaults(repo: TaskRepository, storage: LocalStorage) -> None:
    storage.set_item(TASKS_KEY, json.dumps([{"id": "a", "text": "A", "date": "2024-01-01"}]))

    result = repo.load_tasks()

    assert result.tasks == [
        TaskEntity(id="a", text="A", priority="Medium", date="2024-01-01", completed=False, category="General")
    ]


def test_theme_flag(repo: TaskRepository, storage: LocalStorage) -> None:
    assert repo.load_theme_flag() is None

    assert repo.save_theme_flag(True) is True
    assert repo.load_theme_flag() is True
    assert storage.get_item(THEME_KEY) == "true"

    storage.set_item(THEME_KEY, '"dark"')
    assert repo.load_theme_flag() is None


def test_storage_errors_never_escape() -> None:
    repo = TaskRepository(BrokenStorage(), tasks_key=TASKS_KEY, theme_key=THEME_KEY)

    assert repo.load_tasks().status == LoadStatus.ABSENT
    assert repo.save_tasks(TASKS) is False
    assert repo.load_theme_flag() is None
    assert repo.save_theme_flag(True) is False


def test_service_state_survives_restart(repo: TaskRepository) -> None:
    today = date(2026, 3, 15)
    first = TaskService(repo, today=lambda: today)
    first.initialize()
    added = first.add_task(first.update_draft(text="Persist me", category="Work"))
    first.toggle_complete(added.id)
    first.set_dark_mode(True)

    second = TaskService(repo, today=lambda: today)
    second.initialize()

    assert second.tasks == first.tasks
    assert second.tasks[0].completed is True
    assert len(second.tasks) == 3
    assert second.dark_mode is True


def test_stored_text_is_trimmed_on_load(repo: TaskRepository, storage: LocalStorage) -> None:
    storage.set_item(TASKS_KEY, json.dumps([{"id": "a", "text": "  A  ", "date": "2024-01-05"}]))

    result = repo.load_tasks()

    assert result.ok
    assert result.tasks[0].text == "A"

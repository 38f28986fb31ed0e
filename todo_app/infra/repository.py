from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from todo_app.config import SETTINGS
from todo_app.domain.entities import TaskEntity
from todo_app.domain.enums import DEFAULT_CATEGORY, Priority

from .storage import LocalStorage

logger = logging.getLogger(__name__)


class LoadStatus(StrEnum):
    OK = "ok"
    ABSENT = "absent"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class LoadResult:
    status: LoadStatus
    tasks: list[TaskEntity] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == LoadStatus.OK


class CorruptDataError(ValueError):
    pass


def _require_str(raw: dict, key: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise CorruptDataError(f"task field {key!r} must be a string, got {value!r}")
    return value


def _require_iso_date(raw: dict) -> str:
    value = _require_str(raw, "date")
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        parsed = None
    # string comparisons on dates only work for the zero-padded YYYY-MM-DD form
    if parsed is None or parsed.isoformat() != value:
        raise CorruptDataError(f"task field 'date' must be YYYY-MM-DD, got {value!r}")
    return value


def _to_entity(raw: Any) -> TaskEntity:
    if not isinstance(raw, dict):
        raise CorruptDataError(f"task record must be an object, got {type(raw).__name__}")

    completed = raw.get("completed", False)
    if not isinstance(completed, bool):
        raise CorruptDataError(f"task field 'completed' must be a boolean, got {completed!r}")

    priority = raw.get("priority") or Priority.MEDIUM.value
    category = raw.get("category") or DEFAULT_CATEGORY
    if not isinstance(priority, str) or not isinstance(category, str):
        raise CorruptDataError("task fields 'priority' and 'category' must be strings")

    text = _require_str(raw, "text").strip()
    if not text:
        raise CorruptDataError("task field 'text' must not be blank")

    return TaskEntity(
        id=_require_str(raw, "id"),
        text=text,
        priority=priority,
        date=_require_iso_date(raw),
        completed=completed,
        category=category,
    )


class TaskRepository:
    """Durable storage for the task collection and the theme flag.

    Reads never raise: missing data and unreadable data are reported through
    :class:`LoadResult`. Writes are best effort and only report success.
    """

    def __init__(
        self,
        storage: LocalStorage | None = None,
        tasks_key: str = SETTINGS.tasks_key,
        theme_key: str = SETTINGS.theme_key,
    ) -> None:
        self._storage = storage or LocalStorage()
        self._tasks_key = tasks_key
        self._theme_key = theme_key

    def load_tasks(self) -> LoadResult:
        raw = self._read(self._tasks_key)
        if raw is None:
            return LoadResult(LoadStatus.ABSENT)
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise CorruptDataError(f"expected a list of tasks, got {type(data).__name__}")
            tasks = [_to_entity(item) for item in data]
        except (json.JSONDecodeError, CorruptDataError) as exc:
            logger.warning("Stored tasks under %r are unreadable: %s", self._tasks_key, exc)
            return LoadResult(LoadStatus.CORRUPT)
        logger.info("Loaded %s tasks", len(tasks))
        return LoadResult(LoadStatus.OK, tasks)

    def save_tasks(self, tasks: Iterable[TaskEntity]) -> bool:
        payload = json.dumps([task.to_dict() for task in tasks])
        return self._write(self._tasks_key, payload)

    def load_theme_flag(self) -> Optional[bool]:
        raw = self._read(self._theme_key)
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = None
        if not isinstance(value, bool):
            logger.warning("Stored theme flag under %r is not a boolean", self._theme_key)
            return None
        return value

    def save_theme_flag(self, dark: bool) -> bool:
        return self._write(self._theme_key, json.dumps(bool(dark)))

    def _read(self, key: str) -> Optional[str]:
        try:
            return self._storage.get_item(key)
        except SQLAlchemyError:
            logger.exception("Failed to read %r from storage", key)
            return None

    def _write(self, key: str, value: str) -> bool:
        try:
            self._storage.set_item(key, value)
        except SQLAlchemyError:
            logger.exception("Failed to write %r to storage", key)
            return False
        return True

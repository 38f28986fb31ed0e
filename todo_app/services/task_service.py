from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import fields, replace
from datetime import date, timedelta
from typing import Optional, Protocol

from todo_app.domain.entities import DraftForm, TaskEntity, TaskStats, TaskView
from todo_app.domain.enums import DEFAULT_CATEGORY, FilterMode, Priority, SortMode
from todo_app.domain.filters import TaskFilters, compute_stats, derive_view
from todo_app.infra.repository import LoadResult

logger = logging.getLogger(__name__)

DRAFT_FIELDS = frozenset(f.name for f in fields(DraftForm))
PRIORITY_VALUES = frozenset(p.value for p in Priority)


class TaskRepo(Protocol):
    def load_tasks(self) -> LoadResult: ...

    def save_tasks(self, tasks: tuple[TaskEntity, ...]) -> bool: ...

    def load_theme_flag(self) -> Optional[bool]: ...

    def save_theme_flag(self, dark: bool) -> bool: ...


def _new_id() -> str:
    return uuid.uuid4().hex


class TaskService:
    """Owns the task list, the add/edit form draft and the view settings.

    Every mutating call builds the new task tuple first and swaps it in with
    one assignment, then writes the whole list through the repository.
    """

    def __init__(
        self,
        repo: TaskRepo,
        today: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._repo = repo
        self._today = today
        self._id_factory = id_factory
        self._tasks: tuple[TaskEntity, ...] = ()
        self._filters = TaskFilters()
        self._editing_id: str | None = None
        self._draft = self._blank_draft()
        self._dark_mode = False

    # ---- state accessors ----

    @property
    def tasks(self) -> tuple[TaskEntity, ...]:
        return self._tasks

    @property
    def draft(self) -> DraftForm:
        return self._draft

    @property
    def filters(self) -> TaskFilters:
        return self._filters

    @property
    def editing_id(self) -> str | None:
        return self._editing_id

    @property
    def dark_mode(self) -> bool:
        return self._dark_mode

    def today(self) -> date:
        return self._today()

    def get_task(self, task_id: str) -> TaskEntity | None:
        return next((task for task in self._tasks if task.id == task_id), None)

    # ---- lifecycle ----

    def initialize(self) -> TaskView:
        result = self._repo.load_tasks()
        if result.ok:
            self._tasks = tuple(result.tasks)
        else:
            logger.info("No usable stored tasks (%s), seeding examples", result.status.value)
            self._tasks = self._seed_tasks()
            self._persist()

        self._dark_mode = bool(self._repo.load_theme_flag())
        self._editing_id = None
        self._draft = self._blank_draft()
        return self.derive_view()

    # ---- task operations ----

    def add_task(self, draft: DraftForm | None = None) -> TaskEntity | None:
        if draft is None:
            draft = self._draft
        text = (draft.text or "").strip()
        task_date = self._normalize_date(draft.date) if draft.date else self._today_str()
        if not text or task_date is None:
            logger.debug("Rejected new task: text=%r date=%r", draft.text, draft.date)
            return None

        task = TaskEntity(
            id=self._id_factory(),
            text=text,
            priority=self._normalize_priority(draft.priority),
            date=task_date,
            completed=False,
            category=self._normalize_category(draft.category),
        )
        self._tasks = (task, *self._tasks)
        self._persist()
        self.cancel_edit()
        logger.info("Added task %s", task.id)
        return task

    def toggle_complete(self, task_id: str) -> TaskEntity | None:
        task = self.get_task(task_id)
        if task is None:
            return None
        updated = replace(task, completed=not task.completed)
        self._replace(updated)
        self._persist()
        return updated

    def delete_task(self, task_id: str) -> bool:
        remaining = tuple(task for task in self._tasks if task.id != task_id)
        if len(remaining) == len(self._tasks):
            return False
        self._tasks = remaining
        self._persist()
        if self._editing_id == task_id:
            self.cancel_edit()
        logger.info("Deleted task %s", task_id)
        return True

    # ---- editing ----

    def begin_edit(self, task_id: str) -> DraftForm | None:
        task = self.get_task(task_id)
        if task is None:
            return None
        self._editing_id = task.id
        self._draft = DraftForm(
            text=task.text,
            priority=task.priority,
            date=task.date,
            category=task.category or DEFAULT_CATEGORY,
        )
        return self._draft

    def cancel_edit(self) -> None:
        self._editing_id = None
        self._draft = self._blank_draft()

    def save_edit(self) -> TaskEntity | None:
        if self._editing_id is None:
            return None
        task = self.get_task(self._editing_id)
        if task is None:
            self.cancel_edit()
            return None

        draft = self._draft
        text = task.text if draft.text is None else draft.text.strip()
        task_date = self._normalize_date(draft.date) if draft.date else task.date
        if not text or task_date is None:
            logger.debug("Rejected edit of %s: text=%r date=%r", task.id, draft.text, draft.date)
            return None

        priority = self._normalize_priority(draft.priority) if draft.priority else task.priority
        category = task.category if draft.category is None else self._normalize_category(draft.category)
        updated = replace(task, text=text, priority=priority, date=task_date, category=category)
        self._replace(updated)
        self._persist()
        self.cancel_edit()
        logger.info("Saved task %s", updated.id)
        return updated

    def update_draft(self, **changes) -> DraftForm:
        unknown = set(changes) - DRAFT_FIELDS
        if unknown:
            raise TypeError(f"Unknown draft fields: {', '.join(sorted(unknown))}")
        self._draft = replace(self._draft, **changes)
        return self._draft

    # ---- view ----

    def set_view_parameters(
        self,
        search: str | None = None,
        filter_key: FilterMode | str | None = None,
        sort_key: SortMode | str | None = None,
    ) -> TaskFilters:
        changes = {}
        if search is not None:
            changes["search"] = search
        if filter_key is not None:
            changes["filter_key"] = FilterMode(filter_key)
        if sort_key is not None:
            changes["sort_key"] = SortMode(sort_key)
        self._filters = replace(self._filters, **changes)
        return self._filters

    def derive_view(self) -> TaskView:
        return derive_view(self._tasks, self._filters, self._today())

    def get_stats(self) -> TaskStats:
        return compute_stats(self._tasks)

    # ---- theme ----

    def set_dark_mode(self, dark: bool) -> None:
        self._dark_mode = bool(dark)
        self._repo.save_theme_flag(self._dark_mode)

    def toggle_theme(self) -> bool:
        self.set_dark_mode(not self._dark_mode)
        return self._dark_mode

    # ---- helpers ----

    def _replace(self, updated: TaskEntity) -> None:
        self._tasks = tuple(updated if task.id == updated.id else task for task in self._tasks)

    def _persist(self) -> None:
        if not self._repo.save_tasks(self._tasks):
            logger.warning("Tasks were not saved, keeping %s tasks in memory", len(self._tasks))

    def _today_str(self) -> str:
        return self._today().isoformat()

    def _blank_draft(self) -> DraftForm:
        return DraftForm(date=self._today_str())

    def _seed_tasks(self) -> tuple[TaskEntity, ...]:
        today = self._today()
        return (
            TaskEntity(
                id=self._id_factory(),
                text="Finish the report",
                priority=Priority.HIGH.value,
                date=today.isoformat(),
                completed=False,
                category="Work",
            ),
            TaskEntity(
                id=self._id_factory(),
                text="Buy groceries",
                priority=Priority.MEDIUM.value,
                date=(today + timedelta(days=1)).isoformat(),
                completed=False,
                category="Personal",
            ),
        )

    @staticmethod
    def _normalize_priority(priority: str | None) -> str:
        if priority in PRIORITY_VALUES:
            return str(priority)
        return Priority.MEDIUM.value

    @staticmethod
    def _normalize_category(category: str | None) -> str:
        return (category or "").strip() or DEFAULT_CATEGORY

    @staticmethod
    def _normalize_date(value: str | date) -> str | None:
        if isinstance(value, date):
            return value.isoformat()
        try:
            return date.fromisoformat(value.strip()).isoformat()
        except ValueError:
            return None

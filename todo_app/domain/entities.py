from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as date_type
from typing import Optional

from .enums import DEFAULT_CATEGORY, Priority


@dataclass(frozen=True)
class TaskEntity:
    id: str
    text: str
    priority: str
    date: str
    completed: bool = False
    category: str = DEFAULT_CATEGORY

    def is_overdue(self, today: date_type) -> bool:
        return not self.completed and self.date < today.isoformat()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "priority": self.priority,
            "date": self.date,
            "completed": self.completed,
            "category": self.category,
        }


@dataclass(frozen=True)
class DraftForm:
    """Uncommitted values of the add/edit form.

    A field set to ``None`` was left unset. Adding falls back to today for
    ``date``; saving an edit keeps the task's current value for any of them.
    """

    text: str = ""
    priority: str = Priority.MEDIUM.value
    date: Optional[str] = None
    category: str = DEFAULT_CATEGORY


@dataclass(frozen=True)
class TaskStats:
    total: int
    completed_count: int
    percent: float


@dataclass(frozen=True)
class TaskView:
    tasks: list[TaskEntity] = field(default_factory=list)
    stats: TaskStats = field(default_factory=lambda: TaskStats(1, 0, 0.0))
    task_count: int = 0

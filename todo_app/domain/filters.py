from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from .entities import TaskEntity, TaskStats, TaskView
from .enums import PRIORITY_RANK, FilterMode, Priority, SortMode

UNKNOWN_PRIORITY_RANK = PRIORITY_RANK[Priority.MEDIUM.value]


@dataclass(frozen=True)
class TaskFilters:
    search: str = ""
    filter_key: FilterMode = FilterMode.ALL
    sort_key: SortMode = SortMode.MANUAL


def matches_search(task: TaskEntity, search: str | None) -> bool:
    if not search or not search.strip():
        return True
    needle = search.lower()
    return needle in task.text.lower() or needle in (task.category or "").lower()


def matches_filter(task: TaskEntity, filter_key: FilterMode, today: date) -> bool:
    if filter_key == FilterMode.TODAY:
        return task.date == today.isoformat()
    if filter_key == FilterMode.OVERDUE:
        return task.is_overdue(today)
    if filter_key == FilterMode.COMPLETED:
        return task.completed
    return True


def priority_rank(priority: str) -> int:
    return PRIORITY_RANK.get(priority, UNKNOWN_PRIORITY_RANK)


def sort_tasks(tasks: Iterable[TaskEntity], sort_key: SortMode) -> list[TaskEntity]:
    # sorted() is stable, ties keep canonical order
    if sort_key == SortMode.DATE:
        return sorted(tasks, key=lambda task: task.date)
    if sort_key == SortMode.PRIORITY:
        return sorted(tasks, key=lambda task: priority_rank(task.priority))
    return list(tasks)


def apply_filters(
    tasks: Iterable[TaskEntity], filters: TaskFilters, today: date
) -> list[TaskEntity]:
    """Run search, then filter, then sort over ``tasks``."""
    found = [task for task in tasks if matches_search(task, filters.search)]
    kept = [task for task in found if matches_filter(task, filters.filter_key, today)]
    return sort_tasks(kept, filters.sort_key)


def compute_stats(tasks: Sequence[TaskEntity]) -> TaskStats:
    # an empty collection reads as 0% instead of dividing by zero
    total = max(1, len(tasks))
    completed_count = sum(1 for task in tasks if task.completed)
    return TaskStats(
        total=total,
        completed_count=completed_count,
        percent=100 * completed_count / total,
    )


def derive_view(tasks: Sequence[TaskEntity], filters: TaskFilters, today: date) -> TaskView:
    return TaskView(
        tasks=apply_filters(tasks, filters, today),
        stats=compute_stats(tasks),
        task_count=len(tasks),
    )

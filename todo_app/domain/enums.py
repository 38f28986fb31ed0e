from __future__ import annotations

from enum import StrEnum


class Priority(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class FilterMode(StrEnum):
    ALL = "all"
    TODAY = "today"
    OVERDUE = "overdue"
    COMPLETED = "completed"


class SortMode(StrEnum):
    MANUAL = "manual"
    DATE = "date"
    PRIORITY = "priority"


PRIORITY_RANK = {
    Priority.HIGH.value: 0,
    Priority.MEDIUM.value: 1,
    Priority.LOW.value: 2,
}

DEFAULT_CATEGORY = "General"

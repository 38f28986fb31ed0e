from __future__ import annotations

from collections.abc import Callable
from datetime import date

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from todo_app.domain.entities import TaskEntity
from todo_app.domain.enums import Priority

PRIORITY_OPTIONS = [
    ("High", Priority.HIGH.value),
    ("Medium", Priority.MEDIUM.value),
    ("Low", Priority.LOW.value),
]

PRIORITY_COLORS = {
    Priority.HIGH.value: "#E57B63",
    Priority.MEDIUM.value: "#E0B25B",
    Priority.LOW.value: "#7CC4A1",
}

OVERDUE_COLOR = "#DC2626"


class TaskItemWidget(QWidget):
    def __init__(
        self,
        task: TaskEntity,
        today: date,
        on_toggle: Callable[[str], None],
        on_edit: Callable[[str], None],
        on_delete: Callable[[str], None],
    ):
        super().__init__()
        self.task = task

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(56)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(10)

        self.check = QCheckBox()
        self.check.setChecked(task.completed)
        self.check.toggled.connect(lambda _checked: on_toggle(task.id))

        title = QLabel(task.text)
        title.setProperty("class", "task-title")
        title.setWordWrap(True)
        title.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        if task.completed:
            font = title.font()
            font.setStrikeOut(True)
            title.setFont(font)
            title.setEnabled(False)

        priority = QLabel(task.priority)
        priority.setProperty("class", "task-priority")
        priority.setStyleSheet(
            f"background-color: {PRIORITY_COLORS.get(task.priority, '#9CA3AF')};"
            "border-radius: 8px; padding: 1px 8px; color: #111827;"
        )
        priority.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)

        category = QLabel(task.category)
        category.setProperty("class", "task-meta")

        due = QLabel(task.date)
        due.setProperty("class", "task-meta")
        if task.is_overdue(today):
            due.setStyleSheet(f"color: {OVERDUE_COLOR}; font-weight: 600;")

        meta = QHBoxLayout()
        meta.setSpacing(8)
        meta.addWidget(priority)
        meta.addWidget(category)
        meta.addWidget(due)
        meta.addStretch()

        body = QVBoxLayout()
        body.setSpacing(4)
        body.addWidget(title)
        body.addLayout(meta)

        edit_button = QPushButton("Edit")
        edit_button.setProperty("variant", "secondary")
        edit_button.clicked.connect(lambda: on_edit(task.id))

        delete_button = QPushButton("Delete")
        delete_button.setProperty("variant", "danger")
        delete_button.clicked.connect(lambda: on_delete(task.id))

        layout.addWidget(self.check, 0, Qt.AlignTop)
        layout.addLayout(body, 1)
        layout.addWidget(edit_button, 0, Qt.AlignVCenter)
        layout.addWidget(delete_button, 0, Qt.AlignVCenter)

from __future__ import annotations

from PySide6.QtCore import QDate, Qt, QTimer
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QDateEdit,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from todo_app.domain.entities import DraftForm
from todo_app.domain.enums import FilterMode, SortMode
from todo_app.services.task_service import TaskService

from .palette import apply_palette
from .widgets import PRIORITY_OPTIONS, TaskItemWidget

FILTERS = [
    ("All", FilterMode.ALL.value),
    ("Today", FilterMode.TODAY.value),
    ("Overdue", FilterMode.OVERDUE.value),
    ("Completed", FilterMode.COMPLETED.value),
]

SORTS = [
    ("Manual", SortMode.MANUAL.value),
    ("By Date", SortMode.DATE.value),
    ("By Priority", SortMode.PRIORITY.value),
]


class MainWindow(QWidget):
    def __init__(self, service: TaskService):
        super().__init__()
        self.setWindowTitle("Advanced To-Do List")
        self.resize(760, 720)

        self.service = service
        self._syncing_form = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        layout.addLayout(self._build_header())
        layout.addWidget(self._build_form())
        layout.addLayout(self._build_controls())

        self.task_list = QListWidget()
        self.task_list.setObjectName("TaskList")
        self.task_list.setSpacing(6)
        layout.addWidget(self.task_list, 1)

        self.populate_form(self.service.draft)
        self.refresh_tasks()

        QShortcut(QKeySequence("Ctrl+N"), self, self.cancel_edit)
        QShortcut(QKeySequence("Escape"), self, self.cancel_edit)

    def _build_header(self) -> QHBoxLayout:
        header = QHBoxLayout()
        title = QLabel("Advanced To-Do List")
        title.setProperty("class", "panel-title")
        font = title.font()
        font.setPointSize(font.pointSize() + 6)
        font.setBold(True)
        title.setFont(font)

        self.progress = QProgressBar()
        self.progress.setObjectName("CompletionProgress")
        self.progress.setRange(0, 100)
        self.progress.setFixedWidth(140)

        self.stats_label = QLabel("")
        self.stats_label.setProperty("class", "stats-badge")

        self.theme_button = QPushButton("")
        self.theme_button.setProperty("variant", "ghost")
        self.theme_button.clicked.connect(self.toggle_theme)
        self._sync_theme_button()

        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.progress)
        header.addWidget(self.stats_label)
        header.addWidget(self.theme_button)
        return header

    def _build_form(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("TaskForm")
        form = QHBoxLayout(frame)
        form.setContentsMargins(0, 0, 0, 0)
        form.setSpacing(8)

        self.text_input = QLineEdit()
        self.text_input.setPlaceholderText("Add a new task...")
        self.text_input.textChanged.connect(lambda value: self._on_draft_changed(text=value))
        self.text_input.returnPressed.connect(self.submit_form)

        self.priority_combo = QComboBox()
        for label, value in PRIORITY_OPTIONS:
            self.priority_combo.addItem(label, value)
        self.priority_combo.currentIndexChanged.connect(
            lambda _index: self._on_draft_changed(priority=self.priority_combo.currentData())
        )

        self.date_input = QDateEdit()
        self.date_input.setCalendarPopup(True)
        self.date_input.setDisplayFormat("yyyy-MM-dd")
        self.date_input.dateChanged.connect(
            lambda value: self._on_draft_changed(date=value.toPython().isoformat())
        )

        self.category_input = QLineEdit()
        self.category_input.setPlaceholderText("Category")
        self.category_input.setFixedWidth(120)
        self.category_input.textChanged.connect(lambda value: self._on_draft_changed(category=value))

        self.submit_button = QPushButton("Add")
        self.submit_button.clicked.connect(self.submit_form)

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.setProperty("variant", "secondary")
        self.cancel_button.clicked.connect(self.cancel_edit)

        form.addWidget(self.text_input, 1)
        form.addWidget(self.priority_combo)
        form.addWidget(self.date_input)
        form.addWidget(self.category_input)
        form.addWidget(self.submit_button)
        form.addWidget(self.cancel_button)
        return frame

    def _build_controls(self) -> QHBoxLayout:
        controls = QHBoxLayout()
        controls.setSpacing(8)

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search tasks or categories...")
        self.search_input.textChanged.connect(self.on_search_changed)

        self.filter_combo = QComboBox()
        for label, key in FILTERS:
            self.filter_combo.addItem(label, key)
        self.filter_combo.currentIndexChanged.connect(self.on_filter_changed)

        self.sort_combo = QComboBox()
        for label, key in SORTS:
            self.sort_combo.addItem(label, key)
        self.sort_combo.currentIndexChanged.connect(self.on_sort_changed)

        self.count_label = QLabel("")
        self.count_label.setProperty("class", "stats")

        controls.addWidget(self.search_input, 1)
        controls.addWidget(self.filter_combo)
        controls.addWidget(self.sort_combo)
        controls.addWidget(self.count_label)
        return controls

    def refresh_tasks(self) -> None:
        view = self.service.derive_view()
        today = self.service.today()
        self.task_list.clear()

        for task in view.tasks:
            item = QListWidgetItem()
            item.setData(Qt.UserRole, task.id)
            widget = TaskItemWidget(
                task,
                today,
                on_toggle=self.toggle_task,
                on_edit=self.begin_edit,
                on_delete=self.delete_task,
            )
            self.task_list.addItem(item)
            self.task_list.setItemWidget(item, widget)
            item.setSizeHint(widget.sizeHint())

        if not view.tasks:
            empty = QListWidgetItem("No tasks found. Create your first one!")
            empty.setFlags(Qt.NoItemFlags)
            empty.setTextAlignment(Qt.AlignCenter)
            self.task_list.addItem(empty)

        stats = view.stats
        self.progress.setValue(round(stats.percent))
        self.stats_label.setText(f"{stats.completed_count}/{stats.total} Done")
        self.count_label.setText(f"{len(view.tasks)} shown • {view.task_count} total")

    def populate_form(self, draft: DraftForm) -> None:
        self._syncing_form = True
        try:
            self.text_input.setText(draft.text)
            priority_index = self.priority_combo.findData(draft.priority)
            self.priority_combo.setCurrentIndex(priority_index if priority_index >= 0 else 1)
            if draft.date:
                self.date_input.setDate(QDate.fromString(draft.date, "yyyy-MM-dd"))
            else:
                self.date_input.setDate(QDate.currentDate())
            self.category_input.setText(draft.category)
        finally:
            self._syncing_form = False

        editing = self.service.editing_id is not None
        self.submit_button.setText("Save" if editing else "Add")
        self.cancel_button.setVisible(editing)

    def _on_draft_changed(self, **changes) -> None:
        if self._syncing_form:
            return
        self.service.update_draft(**changes)

    def submit_form(self) -> None:
        if self.service.editing_id is not None:
            saved = self.service.save_edit()
        else:
            saved = self.service.add_task()
        if saved is None:
            self.text_input.setFocus()
            return
        self.populate_form(self.service.draft)
        self.refresh_tasks()

    def begin_edit(self, task_id: str) -> None:
        draft = self.service.begin_edit(task_id)
        if draft is None:
            return
        self.populate_form(draft)
        self.text_input.setFocus()

    def cancel_edit(self) -> None:
        self.service.cancel_edit()
        self.populate_form(self.service.draft)

    def toggle_task(self, task_id: str) -> None:
        self.service.toggle_complete(task_id)
        # the emitting card is destroyed by the refresh
        QTimer.singleShot(0, self.refresh_tasks)

    def delete_task(self, task_id: str) -> None:
        editing = self.service.editing_id == task_id
        self.service.delete_task(task_id)
        if editing:
            self.populate_form(self.service.draft)
        QTimer.singleShot(0, self.refresh_tasks)

    def on_search_changed(self, text: str) -> None:
        self.service.set_view_parameters(search=text)
        self.refresh_tasks()

    def on_filter_changed(self, _index: int) -> None:
        self.service.set_view_parameters(filter_key=self.filter_combo.currentData())
        self.refresh_tasks()

    def on_sort_changed(self, _index: int) -> None:
        self.service.set_view_parameters(sort_key=self.sort_combo.currentData())
        self.refresh_tasks()

    def toggle_theme(self) -> None:
        dark = self.service.toggle_theme()
        app = QApplication.instance()
        if app is not None:
            apply_palette(app, dark)
        self._sync_theme_button()

    def _sync_theme_button(self) -> None:
        self.theme_button.setText("Light mode" if self.service.dark_mode else "Dark mode")

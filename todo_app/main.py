from __future__ import annotations

import logging
import sys
from pathlib import Path

from PySide6.QtGui import QFont, QIcon
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory

from todo_app.config import PROJECT_ROOT
from todo_app.infra.db import init_db
from todo_app.infra.logging import setup_logging
from todo_app.infra.repository import TaskRepository
from todo_app.services.task_service import TaskService
from todo_app.ui.main_window import MainWindow
from todo_app.ui.palette import apply_palette

logger = logging.getLogger(__name__)


def _find_qss_path() -> Path | None:
    candidates = [
        Path(__file__).resolve().parent / "ui" / "styles.qss",
        PROJECT_ROOT / "todo_app" / "ui" / "styles.qss",
    ]
    if getattr(sys, "frozen", False):
        candidates.append(Path(sys.executable).resolve().parent / "ui" / "styles.qss")

    for path in candidates:
        if path.exists():
            return path
    return None


def load_styles(app: QApplication) -> None:
    qss_path = _find_qss_path()
    if not qss_path:
        return
    icon_path = qss_path.parent / "assets" / "todo.png"
    if icon_path.exists():
        app.setWindowIcon(QIcon(str(icon_path)))
    app.setStyleSheet(qss_path.read_text(encoding="utf-8"))


def main() -> None:
    setup_logging()
    try:
        init_db()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Database initialisation failed")
        app = QApplication(sys.argv)
        QMessageBox.critical(None, "DB error", str(exc))
        return

    service = TaskService(TaskRepository())
    service.initialize()

    app = QApplication(sys.argv)
    app.setStyle(QStyleFactory.create("Fusion"))
    apply_palette(app, service.dark_mode)
    app.setFont(QFont("Segoe UI", 10))
    load_styles(app)

    window = MainWindow(service)
    if app.windowIcon():
        window.setWindowIcon(app.windowIcon())
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

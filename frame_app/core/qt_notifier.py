from __future__ import annotations

from loguru import logger
from PySide6.QtWidgets import QApplication, QMessageBox, QWidget


class QtNotifier:
    """
    Modal QMessageBox when a QApplication is running; log-only otherwise
    (headless runs, CLI).
    """

    def __init__(self, parent: QWidget | None = None) -> None:
        self._parent = parent

    def alert(self, title: str, message: str) -> None:
        if QApplication.instance() is None:
            logger.error(f"{title}: {message}")
            return
        QMessageBox.critical(self._parent, title, message)

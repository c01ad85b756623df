"""
MainWindow Class.

The main application window: board statistics header, the grant timeline,
and the host-side handling of edit/delete requests (dialogs, confirmations,
failure notifications).
"""

import logging
from typing import List, Optional

from PySide6.QtCore import QSettings, Qt, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from src.app.config import AppConfig
from src.app.constants import (
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    DELETE_CONFIRM_TEXT,
    DELETE_CONFIRM_TITLE,
    DELETE_FAILED_TITLE,
    EDIT_FAILED_TITLE,
    PROGRESS_FAILED_STATUS,
    SETTINGS_GEOMETRY_KEY,
    SETTINGS_ZOOM_MODE_KEY,
    STATUS_ERROR_PREFIX,
    WINDOW_SETTINGS_APP,
    WINDOW_SETTINGS_KEY,
    WINDOW_TITLE,
)
from src.core.dates import today_utc
from src.core.grants import Grant, compute_grant_stats
from src.core.timeline_scale import ZoomMode
from src.gui.dialogs.grant_details_dialog import GrantDetailsDialog
from src.gui.dialogs.grant_edit_dialog import GrantEditDialog
from src.services.grant_store import StoreError
from src.gui.widgets.timeline import TimelineWidget

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    Hosts the TimelineWidget for one board.
    """

    def __init__(self, store, config: Optional[AppConfig] = None) -> None:
        """
        Initializes the main window.

        Args:
            store: Object implementing GrantStoreProtocol.
            config: Application configuration. Defaults to AppConfig().
        """
        super().__init__()
        self.store = store
        self.config = config or AppConfig()

        title = WINDOW_TITLE
        if self.config.viewer_id:
            title = f"{WINDOW_TITLE} - {self.config.viewer_id}"
        self.setWindowTitle(title)
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)

        # Stats header
        stats_layout = QHBoxLayout()
        self.total_label = QLabel()
        self.active_label = QLabel()
        self.completed_label = QLabel()
        for label in (self.total_label, self.active_label, self.completed_label):
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            stats_layout.addWidget(label)
        layout.addLayout(stats_layout)

        # Timeline
        self.timeline = TimelineWidget()
        self.timeline.grants_updated.connect(self._update_stats)
        self.timeline.details_requested.connect(self._on_details_requested)
        self.timeline.edit_requested.connect(self._on_edit_requested)
        self.timeline.delete_requested.connect(self._on_delete_requested)
        self.timeline.zoom_mode_changed.connect(self._save_zoom_mode)
        self.timeline.progress_write_failed.connect(self._on_progress_write_failed)
        layout.addWidget(self.timeline, 1)

        self.setCentralWidget(central)
        self.setStatusBar(QStatusBar())

        error_signal = getattr(self.store, "error_occurred", None)
        if error_signal is not None:
            error_signal.connect(self._on_store_error)

        self.timeline.set_viewer(self.config.viewer_id)
        self.timeline.set_zoom_mode(self._load_zoom_mode())
        self.timeline.set_store(self.store)
        self.timeline.set_board(self.config.board_id)
        self._update_stats([])
        self._restore_geometry()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _settings(self) -> QSettings:
        return QSettings(WINDOW_SETTINGS_KEY, WINDOW_SETTINGS_APP)

    def _load_zoom_mode(self) -> ZoomMode:
        saved = self._settings().value(SETTINGS_ZOOM_MODE_KEY, None)
        if saved:
            return ZoomMode.from_value(saved)
        return self.config.zoom_mode

    @Slot(str)
    def _save_zoom_mode(self, value: str) -> None:
        settings = self._settings()
        settings.setValue(SETTINGS_ZOOM_MODE_KEY, value)
        settings.sync()

    def _restore_geometry(self) -> None:
        geometry = self._settings().value(SETTINGS_GEOMETRY_KEY)
        if geometry:
            self.restoreGeometry(geometry)

    # ------------------------------------------------------------------
    # Timeline requests
    # ------------------------------------------------------------------

    def _update_stats(self, grants: List[Grant]) -> None:
        stats = compute_grant_stats(grants, today_utc())
        self.total_label.setText(f"Total Grants: {stats.total}")
        self.active_label.setText(f"Active: {stats.active}")
        self.completed_label.setText(f"Completed: {stats.completed}")

    def _find_grant(self, grant_id: str) -> Optional[Grant]:
        return next((g for g in self.timeline.grants if g.id == grant_id), None)

    @Slot(object)
    def _on_details_requested(self, grant: Grant) -> None:
        """Opens the read-only details dialog for a grant."""
        dialog = GrantDetailsDialog(grant, self)
        dialog.exec()

    @Slot(object)
    def _on_edit_requested(self, grant: Grant) -> None:
        """
        Opens the edit form and writes the accepted changes to the store.
        """
        dialog = GrantEditDialog(grant, self)
        if not dialog.exec():
            return

        logger.info(f"Updating grant {grant.id}")
        try:
            self.store.update_grant(grant.id, dialog.get_data())
        except StoreError as e:
            logger.error(f"Failed to update grant '{grant.name}': {e}")
            QMessageBox.critical(
                self, EDIT_FAILED_TITLE, f"Failed to update '{grant.name}'.\n\n{e}"
            )
            return
        self.statusBar().showMessage(f"Saved '{grant.name}'", 3000)

    @Slot(str)
    def _on_delete_requested(self, grant_id: str) -> None:
        """
        Asks for confirmation, then deletes the grant through the store.
        """
        grant = self._find_grant(grant_id)
        name = grant.name if grant else grant_id

        reply = QMessageBox.question(
            self,
            DELETE_CONFIRM_TITLE,
            DELETE_CONFIRM_TEXT.format(name=name),
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply != QMessageBox.StandardButton.Yes:
            return

        logger.info(f"Deleting grant {grant_id}")
        self.store.delete_grant(
            grant_id,
            on_error=lambda e: self._on_delete_failed(name, e),
            on_success=lambda: self.statusBar().showMessage(f"Deleted '{name}'", 3000),
        )

    def _on_delete_failed(self, name: str, error: Exception) -> None:
        logger.error(f"Failed to delete grant '{name}': {error}")
        QMessageBox.critical(
            self, DELETE_FAILED_TITLE, f"Failed to delete '{name}'.\n\n{error}"
        )

    @Slot(str)
    def _on_store_error(self, message: str) -> None:
        self.statusBar().showMessage(STATUS_ERROR_PREFIX + message, 5000)

    @Slot(str, str)
    def _on_progress_write_failed(self, grant_id: str, message: str) -> None:
        grant = self._find_grant(grant_id)
        name = grant.name if grant else grant_id
        self.statusBar().showMessage(
            STATUS_ERROR_PREFIX + PROGRESS_FAILED_STATUS.format(name=name, error=message),
            5000,
        )

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def closeEvent(self, event: QCloseEvent) -> None:
        """Saves the window geometry and releases timeline subscriptions."""
        settings = self._settings()
        settings.setValue(SETTINGS_GEOMETRY_KEY, self.saveGeometry())
        settings.sync()
        self.timeline.shutdown()
        logger.info("Main window closed")
        event.accept()

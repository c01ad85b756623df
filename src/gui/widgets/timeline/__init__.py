"""
Timeline Widget Package.

Main entry point for grant timeline visualization. Provides the
TimelineWidget wrapper that combines TimelineView with zoom controls, the
grant name column and the empty/loading state.

The timeline components live in separate modules:
- timeline/grant_row_item.py - grant bar, progress marker, milestones
- timeline/timeline_scene.py - scene, gridlines and today line
- timeline/interaction.py - drag/hover state machine
- timeline/timeline_view.py - view wiring events, store and rendering
"""

import logging
from typing import Dict, List, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QButtonGroup,
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from src.core.color_palette import ColorAssigner
from src.core.grants import Grant
from src.core.timeline_scale import ROW_HEIGHT, ZoomMode
from src.gui.utils.style_helper import StyleHelper
from src.gui.widgets.empty_state_widget import EmptyStateWidget
from src.gui.widgets.timeline.grant_row_item import (
    GrantRowItem,
    MilestoneItem,
    ProgressMarkerItem,
)
from src.gui.widgets.timeline.interaction import (
    DragState,
    InteractionState,
    TimelineInteraction,
)
from src.gui.widgets.timeline.timeline_scene import (
    GridLineItem,
    TimelineScene,
    TodayLineItem,
)
from src.gui.widgets.timeline.timeline_view import TimelineView

logger = logging.getLogger(__name__)


class _ClickableLabel(QLabel):
    """QLabel that emits clicked on a left-button release."""

    clicked = Signal()

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.clicked.emit()
        super().mouseReleaseEvent(event)


class GrantNameRow(QWidget):
    """
    One entry of the name column. Clicking the name asks for the grant's
    details; viewers who may edit the grant also get edit/delete buttons.
    """

    details_clicked = Signal(str)
    edit_clicked = Signal(str)
    delete_clicked = Signal(str)

    def __init__(self, grant: Grant, can_edit: bool, parent=None):
        """
        Initializes the GrantNameRow.

        Args:
            grant: The grant shown in this row.
            can_edit: Whether the edit and delete buttons are shown.
            parent: Parent widget.
        """
        super().__init__(parent)
        self.grant_id = grant.id
        self.setFixedHeight(ROW_HEIGHT)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(6, 0, 6, 0)
        layout.setSpacing(4)

        self.name_label = _ClickableLabel(grant.name)
        self.name_label.setToolTip(grant.description or grant.name)
        self.name_label.setCursor(Qt.PointingHandCursor)
        self.name_label.clicked.connect(
            lambda: self.details_clicked.emit(self.grant_id)
        )
        layout.addWidget(self.name_label, 1)

        self.edit_button: Optional[QPushButton] = None
        self.delete_button: Optional[QPushButton] = None
        if can_edit:
            self.edit_button = QPushButton("Edit")
            self.edit_button.setToolTip("Edit grant")
            self.edit_button.clicked.connect(
                lambda: self.edit_clicked.emit(self.grant_id)
            )
            layout.addWidget(self.edit_button)

            self.delete_button = QPushButton("Delete")
            self.delete_button.setToolTip("Delete grant")
            self.delete_button.setStyleSheet(StyleHelper.get_destructive_button_style())
            self.delete_button.clicked.connect(
                lambda: self.delete_clicked.emit(self.grant_id)
            )
            layout.addWidget(self.delete_button)


class TimelineWidget(QWidget):
    """
    Wrapper widget for TimelineView + zoom toolbar + name column.

    Emits details/edit/delete requests for the host to act on; never opens
    dialogs itself.
    """

    details_requested = Signal(object)  # Grant
    edit_requested = Signal(object)  # Grant
    delete_requested = Signal(str)  # grant_id
    zoom_mode_changed = Signal(str)  # ZoomMode value
    progress_write_failed = Signal(str, str)  # (grant_id, message)
    grants_updated = Signal(list)  # List[Grant] after each snapshot

    NAME_COLUMN_WIDTH = 220

    def __init__(self, parent=None):
        """
        Initializes the TimelineWidget.

        Args:
            parent (QWidget, optional): The parent widget. Defaults to None.
        """
        super().__init__(parent)
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.layout = QVBoxLayout(self)
        StyleHelper.apply_no_margins(self.layout)

        self.grants: List[Grant] = []
        self.name_rows: Dict[str, GrantNameRow] = {}
        self._name_column_key: Optional[tuple] = None
        self._store = None
        self._board_id: Optional[str] = None
        self._subscription = None
        self._loading = False
        self._palette = ColorAssigner()

        # Toolbar Container (Header)
        self.header_frame = QWidget()
        self.header_frame.setObjectName("TimelineHeader")
        self.header_frame.setStyleSheet(StyleHelper.get_timeline_header_style())
        self.toolbar_layout = QHBoxLayout(self.header_frame)
        self.toolbar_layout.setContentsMargins(4, 4, 4, 4)

        self.zoom_group = QButtonGroup(self)
        self.zoom_group.setExclusive(True)
        self.zoom_buttons: Dict[ZoomMode, QPushButton] = {}
        for mode in ZoomMode:
            button = QPushButton(mode.display_name)
            button.setCheckable(True)
            button.setStyleSheet(StyleHelper.get_zoom_button_style())
            button.clicked.connect(lambda checked=False, m=mode: self.set_zoom_mode(m))
            self.zoom_group.addButton(button)
            self.zoom_buttons[mode] = button
            self.toolbar_layout.addWidget(button)
        self.zoom_buttons[ZoomMode.MONTHLY].setChecked(True)

        self.toolbar_layout.addStretch()
        self.layout.addWidget(self.header_frame)

        # Body: loading/empty state or the timeline
        self.stack = QStackedWidget()
        self.empty_state = EmptyStateWidget()
        self.stack.addWidget(self.empty_state)

        self.content = QWidget()
        content_layout = QHBoxLayout(self.content)
        StyleHelper.apply_no_margins(content_layout)

        self.name_column = QWidget()
        self.name_layout = QVBoxLayout(self.name_column)
        StyleHelper.apply_no_margins(self.name_layout)

        self.name_scroll = QScrollArea()
        self.name_scroll.setFixedWidth(self.NAME_COLUMN_WIDTH)
        self.name_scroll.setWidgetResizable(True)
        self.name_scroll.setFrameShape(QFrame.NoFrame)
        self.name_scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.name_scroll.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.name_scroll.setWidget(self.name_column)
        content_layout.addWidget(self.name_scroll)

        # View
        self.view = TimelineView()
        self.view.progress_write_failed.connect(self.progress_write_failed.emit)
        self.view.verticalScrollBar().valueChanged.connect(
            self.name_scroll.verticalScrollBar().setValue
        )
        content_layout.addWidget(self.view, 1)

        self.stack.addWidget(self.content)
        self.layout.addWidget(self.stack)

        self._rebuild_name_column()
        self._update_body()

    # ------------------------------------------------------------------
    # Store wiring
    # ------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        """True until the first snapshot of the current board arrives."""
        return self._loading

    @property
    def zoom_mode(self) -> ZoomMode:
        """The active zoom mode."""
        return self.view.zoom_mode

    def set_store(self, store) -> None:
        """
        Sets the grant store and resubscribes to the current board.

        Args:
            store: Object implementing GrantStoreProtocol.
        """
        self._release_subscription()
        self._store = store
        self.view.set_store(store)
        if self._board_id is not None:
            self._subscribe()

    def set_board(self, board_id: Optional[str]) -> None:
        """
        Switches to another board. Shows the loading state until the
        store delivers the first snapshot.

        Args:
            board_id: The board to display.
        """
        self._release_subscription()
        self._board_id = board_id
        self._subscribe()

    def _subscribe(self) -> None:
        if self._store is None:
            return
        self._loading = True
        self._update_body()
        self._subscription = self._store.subscribe(self._board_id, self._on_snapshot)
        logger.debug(f"Subscribed to board {self._board_id!r}")

    def _release_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_snapshot(self, grants: List[Grant]) -> None:
        self.set_grants(grants)

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def set_grants(self, grants: List[Grant]) -> None:
        """
        Displays the given grants (ends the loading state).

        Args:
            grants: Grants in display order.
        """
        self.grants = list(grants)
        self._loading = False
        self._palette.retain(g.id for g in self.grants)
        self.view.set_grants(self.grants, self._palette)
        self._rebuild_name_column()
        self._update_body()
        self.grants_updated.emit(self.grants)

    def set_viewer(self, viewer_id: Optional[str]) -> None:
        """Sets the current viewer (drives edit permissions)."""
        self.view.set_viewer(viewer_id)
        self._rebuild_name_column()

    def set_zoom_mode(self, mode) -> None:
        """
        Sets the zoom mode.

        Args:
            mode: A ZoomMode or its string value.
        """
        new_mode = mode if isinstance(mode, ZoomMode) else ZoomMode.from_value(mode)
        self.zoom_buttons[new_mode].setChecked(True)
        if new_mode == self.view.zoom_mode:
            return
        self.view.set_zoom_mode(new_mode)
        self.zoom_mode_changed.emit(new_mode.value)

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------

    def _rebuild_name_column(self) -> None:
        viewer_id = self.view.viewer_id
        key = tuple(
            (g.id, g.name, g.description, g.can_edit(viewer_id)) for g in self.grants
        )
        if key == self._name_column_key:
            # Progress-only snapshots (every drag frame) leave the column as is
            return
        self._name_column_key = key

        while self.name_layout.count():
            item = self.name_layout.takeAt(0)
            if item.widget() is not None:
                item.widget().deleteLater()
        self.name_rows = {}

        header = QLabel("Grant")
        header.setFixedHeight(int(self.view.padding.top))
        header.setAlignment(Qt.AlignLeft | Qt.AlignBottom)
        header.setContentsMargins(6, 0, 6, 6)
        self.name_layout.addWidget(header)

        for grant in self.grants:
            row = GrantNameRow(grant, grant.can_edit(viewer_id))
            row.details_clicked.connect(self._on_details_clicked)
            row.edit_clicked.connect(self._on_edit_clicked)
            row.delete_clicked.connect(self.delete_requested.emit)
            self.name_layout.addWidget(row)
            self.name_rows[grant.id] = row
        self.name_layout.addStretch()

    def _update_body(self) -> None:
        if self._loading:
            self.empty_state.show_loading()
            self.stack.setCurrentWidget(self.empty_state)
        elif not self.grants:
            self.empty_state.show_empty()
            self.stack.setCurrentWidget(self.empty_state)
        else:
            self.stack.setCurrentWidget(self.content)

    def _find_grant(self, grant_id: str) -> Optional[Grant]:
        return next((g for g in self.grants if g.id == grant_id), None)

    def _on_details_clicked(self, grant_id: str) -> None:
        grant = self._find_grant(grant_id)
        if grant is not None:
            self.details_requested.emit(grant)

    def _on_edit_clicked(self, grant_id: str) -> None:
        grant = self._find_grant(grant_id)
        if grant is not None:
            self.edit_requested.emit(grant)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """Releases the board subscription and the view's listeners."""
        self._release_subscription()
        self.view.shutdown()

    def closeEvent(self, event):
        """Releases subscriptions when the widget is closed."""
        self.shutdown()
        super().closeEvent(event)


__all__ = [
    "TimelineWidget",
    "GrantNameRow",
    "GrantRowItem",
    "ProgressMarkerItem",
    "MilestoneItem",
    "TimelineScene",
    "GridLineItem",
    "TodayLineItem",
    "TimelineInteraction",
    "InteractionState",
    "DragState",
    "TimelineView",
]

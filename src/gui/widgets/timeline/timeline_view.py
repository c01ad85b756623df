"""
Timeline View Module.

Provides the TimelineView class for rendering and interacting with the grant
timeline.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from PySide6.QtCore import QEvent, QObject, QPointF, QSize, Qt, QTimer, Signal
from PySide6.QtGui import QPainter
from PySide6.QtWidgets import QApplication, QGraphicsView, QLabel

from src.core.color_palette import ColorAssigner
from src.core.dates import format_date, today_utc
from src.core.grants import Grant, Milestone
from src.core.timeline_scale import (
    DEFAULT_PADDING,
    CoordinateMapper,
    ScaleWindow,
    ZoomMode,
    calculate_scale,
    surface_height,
)
from src.gui.utils.style_helper import StyleHelper, parse_color
from src.gui.widgets.timeline.grant_row_item import GrantRowItem, ProgressMarkerItem
from src.gui.widgets.timeline.interaction import TimelineInteraction
from src.gui.widgets.timeline.timeline_scene import (
    GridLineItem,
    TimelineScene,
    TodayLineItem,
)
from src.gui.widgets.timeline_grid import generate_grid

logger = logging.getLogger(__name__)


class _GlobalReleaseFilter(QObject):
    """
    Application-wide event filter ending a drag on any mouse release,
    including releases outside the timeline.
    """

    def __init__(self, on_release, parent=None):
        super().__init__(parent)
        self._on_release = on_release

    def eventFilter(self, obj, event):
        if event.type() == QEvent.MouseButtonRelease:
            self._on_release()
        return False


class TimelineView(QGraphicsView):
    """
    Custom Graphics View for displaying the grant TimelineScene.
    Handles:
    - Rebuilding grid, today line and grant rows on every state change.
    - Milestone subscriptions per visible grant.
    - Feeding pointer events into TimelineInteraction.
    - Writing dragged progress dates to the store (no debouncing).
    """

    progress_write_failed = Signal(str, str)  # (grant_id, message)

    TOOLTIP_MARGIN = 4
    TODAY_REFRESH_MS = 60_000

    def __init__(self, parent=None):
        """
        Initializes the TimelineView.

        Args:
            parent (QWidget, optional): The parent widget. Defaults to None.
        """
        super().__init__(parent)
        self.scene = TimelineScene(self)
        self.setScene(self.scene)

        self.setRenderHint(QPainter.Antialiasing)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAsNeeded)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAsNeeded)
        self.viewport().setMouseTracking(True)

        self.grants: List[Grant] = []
        self.padding = DEFAULT_PADDING
        self._zoom_mode = ZoomMode.MONTHLY
        self._viewer_id: Optional[str] = None
        self._store = None
        self._palette = ColorAssigner()
        self._scale: Optional[ScaleWindow] = None
        self._mapper: Optional[CoordinateMapper] = None
        self._row_items: Dict[str, GrantRowItem] = {}
        self._milestone_subscriptions: Dict[str, object] = {}
        self._milestones: Dict[str, List[Milestone]] = {}
        self._today_line: Optional[TodayLineItem] = None
        self._is_shut_down = False

        self.interaction = TimelineInteraction(on_progress=self._on_drag_progress)

        # Hover date label floats over the viewport
        self.hover_label = QLabel(self.viewport())
        self.hover_label.setStyleSheet(StyleHelper.get_date_tooltip_style())
        self.hover_label.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self.hover_label.hide()

        self._release_filter = _GlobalReleaseFilter(self._end_drag, self)
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self._release_filter)

        # Keeps the TODAY line on the right day across midnight
        self.today_timer = QTimer(self)
        self.today_timer.setInterval(self.TODAY_REFRESH_MS)
        self.today_timer.timeout.connect(self.refresh_today_line)
        self.today_timer.start()

        self.render_timeline()

    def minimumSizeHint(self):
        """
        Override minimum size hint to allow vertical shrinking.

        Returns:
            QSize: A small minimum size (200x100) to allow shrinking.
        """
        return QSize(200, 100)

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def zoom_mode(self) -> ZoomMode:
        """The active zoom mode."""
        return self._zoom_mode

    @property
    def viewer_id(self) -> Optional[str]:
        """The viewer whose permissions drive marker interactivity."""
        return self._viewer_id

    @property
    def mapper(self) -> Optional[CoordinateMapper]:
        """Coordinate mapper of the last render pass."""
        return self._mapper

    @property
    def scale_window(self) -> Optional[ScaleWindow]:
        """ScaleWindow of the last render pass."""
        return self._scale

    def set_store(self, store) -> None:
        """
        Sets the grant store used for milestone subscriptions and writes.

        Args:
            store: Object implementing GrantStoreProtocol, or None.
        """
        self._release_milestone_subscriptions()
        self._store = store
        self._sync_milestone_subscriptions()

    def set_viewer(self, viewer_id: Optional[str]) -> None:
        """Sets the current viewer and re-renders the rows."""
        if viewer_id == self._viewer_id:
            return
        self._viewer_id = viewer_id
        if self.interaction.is_dragging:
            self.interaction.cancel()
        self.render_timeline()

    def set_zoom_mode(self, mode) -> None:
        """
        Sets the zoom mode and re-renders.

        Args:
            mode: A ZoomMode or its string value.
        """
        new_mode = mode if isinstance(mode, ZoomMode) else ZoomMode.from_value(mode)
        if new_mode == self._zoom_mode:
            return
        self._zoom_mode = new_mode
        logger.debug(f"Zoom mode set to {new_mode.value}")
        self.render_timeline()

    def set_grants(
        self, grants: List[Grant], palette: Optional[ColorAssigner] = None
    ) -> None:
        """
        Replaces the grant list and re-renders.

        Args:
            grants: Grants in display order (the store delivers them sorted
                by start date).
            palette: Color assigner to use from now on. Defaults to the
                view's own assigner.
        """
        self.grants = list(grants)
        if palette is not None:
            self._palette = palette
        self._sync_milestone_subscriptions()
        self.render_timeline()

    def row_item(self, grant_id: str) -> Optional[GrantRowItem]:
        """Returns the row item of a grant in the current scene."""
        return self._row_items.get(grant_id)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_timeline(self) -> None:
        """
        Rebuilds the scene for the current grants, zoom mode and viewer.
        """
        mode = self._zoom_mode
        padding = self.padding
        self._scale = calculate_scale(self.grants, mode)
        width = mode.timeline_width
        height = surface_height(len(self.grants), padding)
        self._mapper = CoordinateMapper(width, padding, self._scale)
        self.interaction.set_mapper(self._mapper)

        self.scene.clear()
        self._today_line = None
        self._row_items = {}
        self.scene.setSceneRect(0, 0, width, height)

        for line in generate_grid(self._scale, mode):
            x = self._mapper.date_to_x(line.date)
            self.scene.addItem(GridLineItem(x, padding.top, height, line.label))

        today_x = self._mapper.date_to_x(today_utc())
        self._today_line = TodayLineItem(today_x, padding.top, height)
        self.scene.addItem(self._today_line)

        for index, grant in enumerate(self.grants):
            color = parse_color(self._palette.resolve(grant))
            row = GrantRowItem(
                grant,
                index,
                self._mapper,
                padding,
                color,
                grant.can_edit(self._viewer_id),
            )
            self.scene.addItem(row)
            row.set_milestones(self._milestones.get(grant.id, []))
            self._row_items[grant.id] = row

        self.viewport().update()

    def refresh_today_line(self) -> None:
        """Moves the TODAY line to the current date."""
        if self._today_line is None or self._mapper is None:
            return
        today_x = self._mapper.date_to_x(today_utc())
        if today_x != self._today_line.x_pos:
            logger.debug(f"Moving today line to x={today_x:.1f}")
            self._today_line.set_x(today_x)

    # ------------------------------------------------------------------
    # Milestones
    # ------------------------------------------------------------------

    def _sync_milestone_subscriptions(self) -> None:
        """Subscribes to milestones of new grants, drops removed ones."""
        current_ids = {g.id for g in self.grants}

        for grant_id in list(self._milestone_subscriptions):
            if grant_id not in current_ids:
                self._milestone_subscriptions.pop(grant_id).unsubscribe()
                self._milestones.pop(grant_id, None)

        if self._store is None or self._is_shut_down:
            return

        for grant in self.grants:
            if grant.id in self._milestone_subscriptions:
                continue
            self._milestone_subscriptions[grant.id] = self._store.subscribe_milestones(
                grant.id, lambda ms, gid=grant.id: self._on_milestones(gid, ms)
            )

    def _on_milestones(self, grant_id: str, milestones: List[Milestone]) -> None:
        self._milestones[grant_id] = list(milestones)
        row = self._row_items.get(grant_id)
        if row is not None:
            row.set_milestones(self._milestones[grant_id])

    def _release_milestone_subscriptions(self) -> None:
        for subscription in self._milestone_subscriptions.values():
            subscription.unsubscribe()
        self._milestone_subscriptions = {}
        self._milestones = {}

    # ------------------------------------------------------------------
    # Drag / hover
    # ------------------------------------------------------------------

    def _event_scene_pos(self, event) -> QPointF:
        try:
            pos = event.position().toPoint()
        except AttributeError:
            pos = event.pos()
        return self.mapToScene(pos)

    def _marker_at(self, scene_pos: QPointF) -> Optional[ProgressMarkerItem]:
        for item in self.scene.items(scene_pos):
            if isinstance(item, ProgressMarkerItem):
                return item
        return None

    def mousePressEvent(self, event):
        """
        Starts a drag when an editable progress marker is pressed.
        """
        if event.button() == Qt.LeftButton:
            marker = self._marker_at(self._event_scene_pos(event))
            if marker is not None and marker.draggable:
                grant = next((g for g in self.grants if g.id == marker.grant_id), None)
                if grant is not None and self.interaction.press_marker(
                    grant, self._viewer_id
                ):
                    self.hover_label.hide()
                    event.accept()
                    return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        """
        Moves the dragged marker, or updates the hover date when idle.
        """
        scene_pos = self._event_scene_pos(event)
        was_dragging = self.interaction.is_dragging
        result = self.interaction.move(scene_pos.x(), self.grants)

        if was_dragging:
            event.accept()
            return

        if result is not None:
            self._show_hover_date(result)
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        """Ends any drag."""
        self._end_drag()
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event):
        """Clears the hover date; a drag keeps going."""
        self.interaction.leave()
        self.hover_label.hide()
        super().leaveEvent(event)

    def _end_drag(self) -> None:
        if self.interaction.is_dragging:
            self.interaction.release()

    def _show_hover_date(self, value: datetime) -> None:
        if self.interaction.is_dragging or self._mapper is None:
            self.hover_label.hide()
            return
        self.hover_label.setText(format_date(value))
        self.hover_label.adjustSize()
        anchor = self.mapFromScene(QPointF(self._mapper.date_to_x(value), 0))
        self.hover_label.move(
            int(anchor.x() - self.hover_label.width() / 2), self.TOOLTIP_MARGIN
        )
        self.hover_label.show()
        self.hover_label.raise_()

    def _on_drag_progress(self, grant_id: str, progress_date: datetime) -> None:
        """
        Moves the row locally and writes the new date to the store.
        The store's echo replaces the local state on its next snapshot.
        """
        row = self._row_items.get(grant_id)
        if row is not None:
            row.set_progress_date(progress_date)

        if self._store is not None:
            self._store.set_progress_date(
                grant_id,
                progress_date,
                on_error=lambda e, gid=grant_id: self._on_progress_write_failed(gid, e),
            )

    def _on_progress_write_failed(self, grant_id: str, error: Exception) -> None:
        logger.error(f"Failed to update progress of grant {grant_id}: {error}")
        self.progress_write_failed.emit(grant_id, str(error))

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """
        Abandons any drag, stops the today-line timer, releases milestone
        subscriptions and removes the application-wide release filter. Safe to call more than once.
        """
        if self._is_shut_down:
            return
        self._is_shut_down = True
        self.interaction.cancel()
        self.today_timer.stop()
        self._release_milestone_subscriptions()
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self._release_filter)
        logger.debug("Timeline view shut down")

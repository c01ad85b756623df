"""
Grant Row Item Module.

Provides the graphics items that make up one grant row on the timeline:
- GrantRowItem: background bar and progress fill
- ProgressMarkerItem: diamond glyph at the progress date (draggable for editors)
- MilestoneItem: dashed guide, numbered badge and label at a target date

All items draw in scene coordinates; the row itself sits at (0, 0).
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import (
    QBrush,
    QColor,
    QCursor,
    QPainter,
    QPainterPath,
    QPen,
    QPolygonF,
)
from PySide6.QtWidgets import QGraphicsItem, QGraphicsPolygonItem

from src.core.dates import format_date
from src.core.grants import Grant, Milestone
from src.core.timeline_scale import ROW_HEIGHT, CoordinateMapper, Padding, row_top
from src.gui.utils.style_helper import PALETTE

logger = logging.getLogger(__name__)

BAR_INSET = 10  # Space above and below the bar inside a row
BACKGROUND_OPACITY = 0.3


@dataclass(frozen=True)
class RowGeometry:
    """
    Pixel geometry of one grant row.

    Attributes:
        top: Row top (padding.top + index * row height).
        start_x: x of the start date.
        end_x: x of the end date (may be left of start_x for bad data).
        progress_x: x of the progress date, clamped into the span.
        bar_y: Top of the bar.
        bar_height: Height of the bar.
    """

    top: float
    start_x: float
    end_x: float
    progress_x: float
    bar_y: float
    bar_height: float

    @property
    def center_y(self) -> float:
        """Vertical center of the bar."""
        return self.bar_y + self.bar_height / 2

    @property
    def background_width(self) -> float:
        """Width of the full-duration bar; negative for malformed grants."""
        return self.end_x - self.start_x

    @property
    def progress_width(self) -> float:
        """Width of the progress fill."""
        return self.progress_x - self.start_x

    @property
    def has_progress(self) -> bool:
        """Whether the progress fill is drawn."""
        return self.progress_x > self.start_x


def build_row_geometry(
    grant: Grant,
    index: int,
    mapper: CoordinateMapper,
    padding: Padding,
    progress_date: Optional[datetime] = None,
) -> RowGeometry:
    """
    Computes the geometry of a grant row.

    Args:
        grant: The grant to lay out.
        index: Position of the grant in the ordered list.
        mapper: Coordinate mapper of the current render pass.
        padding: Layout padding.
        progress_date: Overrides the grant's progress date (used while
            dragging, before the store echoes the write back).

    Returns:
        RowGeometry: The computed geometry.
    """
    top = row_top(index, padding)
    bar_y = top + BAR_INSET
    progress = grant.clamp_to_span(progress_date or grant.progress_date)
    return RowGeometry(
        top=top,
        start_x=mapper.date_to_x(grant.start_date),
        end_x=mapper.date_to_x(grant.end_date),
        progress_x=mapper.date_to_x(progress),
        bar_y=bar_y,
        bar_height=ROW_HEIGHT - 2 * BAR_INSET,
    )


def milestone_tooltip(milestone: Milestone) -> str:
    """
    Returns the tooltip text of a milestone, or "" when it has no label.
    """
    if not milestone.label or milestone.target_date is None:
        return ""
    return (
        f"Milestone {milestone.number}: {milestone.label}\n"
        f"Target: {format_date(milestone.target_date)}"
    )


class ProgressMarkerItem(QGraphicsPolygonItem):
    """
    Diamond glyph at a grant's progress date.
    Only editors get the resize cursor; the view decides whether a press
    starts a drag based on the draggable flag.
    """

    HALF_SIZE = 10

    def __init__(self, grant_id: str, draggable: bool, parent=None):
        """
        Initializes the ProgressMarkerItem.

        Args:
            grant_id: The grant this marker belongs to.
            draggable: Whether the current viewer may drag it.
            parent: Parent graphics item.
        """
        super().__init__(parent)
        self.grant_id = grant_id
        self.draggable = draggable
        self._center = QPointF(0, 0)

        pen = QPen(QColor(PALETTE["text_main"]), 2)
        pen.setCosmetic(True)
        self.setPen(pen)
        self.setBrush(QBrush(QColor(PALETTE["primary"] if draggable else PALETTE["text_dim"])))
        self.setZValue(100)

        if draggable:
            self.setCursor(QCursor(Qt.SizeHorCursor))
        else:
            self.setCursor(QCursor(Qt.ArrowCursor))

    def set_center(self, x: float, y: float) -> None:
        """Moves the diamond so it is centered on (x, y)."""
        half = self.HALF_SIZE
        self._center = QPointF(x, y)
        self.setPolygon(
            QPolygonF(
                [
                    QPointF(x, y - half),
                    QPointF(x + half, y),
                    QPointF(x, y + half),
                    QPointF(x - half, y),
                ]
            )
        )

    @property
    def center_x(self) -> float:
        """Horizontal scene position of the diamond's center."""
        return self._center.x()

    @property
    def center_y(self) -> float:
        """Vertical scene position of the diamond's center."""
        return self._center.y()


class MilestoneItem(QGraphicsItem):
    """
    Milestone target marker: dashed vertical guide, numbered circle and an
    "M{number}" label above the bar.
    """

    RADIUS = 10
    GUIDE_OVERHANG = 5

    def __init__(
        self,
        milestone: Milestone,
        x: float,
        bar_y: float,
        bar_height: float,
        color: QColor,
        parent=None,
    ):
        """
        Initializes the MilestoneItem.

        Args:
            milestone: The milestone to draw.
            x: Horizontal position of the target date.
            bar_y: Top of the parent row's bar.
            bar_height: Height of the parent row's bar.
            color: The grant's color.
            parent: Parent graphics item.
        """
        super().__init__(parent)
        self.milestone = milestone
        self.x_pos = x
        self.bar_y = bar_y
        self.bar_height = bar_height
        self.color = QColor(color)
        self.setZValue(50)

        tooltip = milestone_tooltip(milestone)
        if tooltip:
            self.setToolTip(tooltip)

    @property
    def center_y(self) -> float:
        """Vertical center of the badge."""
        return self.bar_y + self.bar_height / 2

    @property
    def label_text(self) -> str:
        """Text drawn above the bar."""
        return f"M{self.milestone.number}"

    def boundingRect(self) -> QRectF:
        """
        Covers the guide, the badge and the label above the bar.
        """
        top = self.bar_y - 24
        bottom = self.bar_y + self.bar_height + self.GUIDE_OVERHANG
        width = 40
        return QRectF(self.x_pos - width / 2, top, width, bottom - top + 1)

    def shape(self) -> QPainterPath:
        """Only the badge is hoverable for the tooltip."""
        path = QPainterPath()
        path.addEllipse(QPointF(self.x_pos, self.center_y), self.RADIUS, self.RADIUS)
        return path

    def paint(self, painter, option, widget=None):
        """Draws guide, badge, number and label."""
        painter.setRenderHint(QPainter.Antialiasing)
        x = self.x_pos

        # 1. Dashed guide
        guide_color = QColor(self.color)
        guide_color.setAlphaF(0.6)
        guide_pen = QPen(guide_color, 2)
        guide_pen.setStyle(Qt.DashLine)
        guide_pen.setDashPattern([2, 1])
        painter.setPen(guide_pen)
        painter.drawLine(
            QPointF(x, self.bar_y - self.GUIDE_OVERHANG),
            QPointF(x, self.bar_y + self.bar_height + self.GUIDE_OVERHANG),
        )

        # 2. Badge
        painter.setPen(QPen(self.color, 2))
        painter.setBrush(QBrush(QColor(PALETTE["surface"])))
        badge = QRectF(
            x - self.RADIUS, self.center_y - self.RADIUS, self.RADIUS * 2, self.RADIUS * 2
        )
        painter.drawEllipse(badge)

        font = painter.font()
        font.setBold(True)
        font.setPointSize(7)
        painter.setFont(font)
        painter.setPen(QPen(QColor(PALETTE["text_main"])))
        painter.drawText(badge, Qt.AlignCenter, str(self.milestone.number))

        # 3. Label above the bar
        label_rect = QRectF(x - 20, self.bar_y - 24, 40, 14)
        painter.drawText(label_rect, Qt.AlignHCenter | Qt.AlignBottom, self.label_text)


class GrantRowItem(QGraphicsItem):
    """
    One grant row: translucent full-duration bar, opaque progress fill,
    milestones and the progress marker as children.
    """

    def __init__(
        self,
        grant: Grant,
        index: int,
        mapper: CoordinateMapper,
        padding: Padding,
        color: QColor,
        can_edit: bool,
        parent=None,
    ):
        """
        Initializes the GrantRowItem.

        Args:
            grant: The grant to draw.
            index: Row index in the ordered grant list.
            mapper: Coordinate mapper of the current render pass.
            padding: Layout padding.
            color: The grant's resolved color.
            can_edit: Whether the viewer may drag the progress marker.
            parent: Parent graphics item.
        """
        super().__init__(parent)
        self.grant = grant
        self.index = index
        self.mapper = mapper
        self.padding = padding
        self.color = QColor(color)
        self.can_edit = can_edit
        self.geometry = build_row_geometry(grant, index, mapper, padding)
        self.milestone_items: List[MilestoneItem] = []

        self.marker = ProgressMarkerItem(grant.id, can_edit, self)
        self.marker.setToolTip(f"Progress: {format_date(grant.progress_date)}")
        self._place_marker()

    def _place_marker(self) -> None:
        self.marker.set_center(self.geometry.progress_x, self.geometry.center_y)

    def set_progress_date(self, progress_date: datetime) -> None:
        """
        Moves the progress fill and marker without waiting for the store.

        Args:
            progress_date: The new progress date (clamped into the span).
        """
        self.prepareGeometryChange()
        self.geometry = build_row_geometry(
            self.grant, self.index, self.mapper, self.padding, progress_date
        )
        self._place_marker()
        self.marker.setToolTip(
            f"Progress: {format_date(self.grant.clamp_to_span(progress_date))}"
        )
        self.update()

    def set_milestones(self, milestones: List[Milestone]) -> None:
        """
        Replaces the milestone markers of this row.

        Milestones without a target date are skipped. Targets outside the
        bar are drawn wherever they map.

        Args:
            milestones: Milestones ordered by number.
        """
        scene = self.scene()
        for item in self.milestone_items:
            if scene is not None:
                scene.removeItem(item)
            else:
                item.setParentItem(None)
        self.milestone_items = []

        for milestone in milestones:
            if milestone.target_date is None:
                logger.debug(
                    f"Milestone {milestone.id} of grant {self.grant.id} has no target date"
                )
                continue
            item = MilestoneItem(
                milestone,
                self.mapper.date_to_x(milestone.target_date),
                self.geometry.bar_y,
                self.geometry.bar_height,
                self.color,
                self,
            )
            self.milestone_items.append(item)

    def boundingRect(self) -> QRectF:
        """
        The full row band across the drawing surface.
        """
        left = min(self.geometry.start_x, self.geometry.end_x, 0.0)
        right = max(self.geometry.start_x, self.geometry.end_x, self.mapper.width)
        return QRectF(left, self.geometry.top, right - left, ROW_HEIGHT)

    def paint(self, painter, option, widget=None):
        """
        Draws the background bar and, when progress is past the start,
        the progress fill.
        """
        painter.setRenderHint(QPainter.Antialiasing)
        geo = self.geometry

        border = QPen(QColor(PALETTE["border"]), 2)
        border.setCosmetic(True)
        painter.setPen(border)

        # 1. Full-duration bar (negative width for malformed grants is drawn as-is)
        background = QColor(self.color)
        background.setAlphaF(BACKGROUND_OPACITY)
        painter.setBrush(QBrush(background))
        painter.drawRect(QRectF(geo.start_x, geo.bar_y, geo.background_width, geo.bar_height))

        # 2. Progress fill
        if geo.has_progress:
            painter.setBrush(QBrush(self.color))
            painter.drawRect(
                QRectF(geo.start_x, geo.bar_y, geo.progress_width, geo.bar_height)
            )

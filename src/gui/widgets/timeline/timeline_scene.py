"""
Timeline Scene Module.

Provides the scene plus the calendar grid and today-line items for the
grant timeline.
"""

import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor, QFont, QPen
from PySide6.QtWidgets import (
    QGraphicsItem,
    QGraphicsLineItem,
    QGraphicsScene,
    QGraphicsSimpleTextItem,
)

from src.gui.utils.style_helper import PALETTE

logger = logging.getLogger(__name__)


class TimelineScene(QGraphicsScene):
    """
    Custom Graphics Scene for the Timeline.
    Sets the background color and clears per-pass items.
    """

    def __init__(self, parent=None):
        """
        Initializes the TimelineScene.

        Args:
            parent (QObject, optional): The parent object. Defaults to None.
        """
        super().__init__(parent)
        self.setBackgroundBrush(QBrush(QColor(PALETTE["app_bg"])))

    def grid_items(self):
        """Returns the gridline items currently in the scene."""
        return [i for i in self.items() if isinstance(i, GridLineItem)]


def _centered_label(text: str, parent: QGraphicsItem, x: float, y: float, bold=False):
    """Adds a text item horizontally centered on x with its baseline near y."""
    label = QGraphicsSimpleTextItem(text, parent)
    font = QFont(label.font())
    font.setPointSize(8)
    font.setBold(bold)
    label.setFont(font)
    rect = label.boundingRect()
    label.setPos(x - rect.width() / 2, y - rect.height())
    return label


class GridLineItem(QGraphicsLineItem):
    """
    Vertical calendar gridline with its date label above the rows.
    """

    LABEL_OFFSET = 10  # Label baseline above padding.top

    def __init__(self, x: float, top: float, bottom: float, label: str, parent=None):
        """
        Initializes the GridLineItem.

        Args:
            x: Horizontal position in scene coordinates.
            top: Top of the line (padding.top).
            bottom: Bottom of the line (surface height).
            label: Date label text.
            parent: Parent graphics item.
        """
        super().__init__(x, top, x, bottom, parent)
        self.label_text = label

        pen = QPen(QColor(PALETTE["grid"]), 1)
        pen.setCosmetic(True)
        self.setPen(pen)
        self.setZValue(-10)  # Behind the rows

        self.label_item = _centered_label(label, self, x, top - self.LABEL_OFFSET)
        self.label_item.setBrush(QBrush(QColor(PALETTE["text_dim"])))

    @property
    def x_pos(self) -> float:
        """Horizontal scene position of the line."""
        return self.line().x1()


class TodayLineItem(QGraphicsLineItem):
    """
    Non-interactive dashed line marking today, labelled "TODAY".
    """

    LABEL_OFFSET = 30

    def __init__(self, x: float, top: float, bottom: float, parent=None):
        """
        Initializes the TodayLineItem.

        Args:
            x: Horizontal position of today.
            top: Top of the line (padding.top).
            bottom: Bottom of the line (surface height).
            parent: Parent graphics item.
        """
        super().__init__(x, top, x, bottom, parent)

        pen = QPen(QColor(PALETTE["today"]), 2)
        pen.setCosmetic(True)
        pen.setStyle(Qt.DashLine)
        pen.setDashPattern([4, 4])
        self.setPen(pen)

        self.setFlag(QGraphicsItem.ItemIsMovable, False)
        self.setFlag(QGraphicsItem.ItemIsSelectable, False)
        self.setZValue(90)  # Above rows, below markers

        self.label_item = _centered_label(
            "TODAY", self, x, top - self.LABEL_OFFSET, bold=True
        )
        self.label_item.setBrush(QBrush(QColor(PALETTE["today"])))

    @property
    def x_pos(self) -> float:
        """Horizontal scene position of the line."""
        return self.line().x1()

    def set_x(self, x: float) -> None:
        """Moves the line and its label to a new horizontal position."""
        line = self.line()
        self.setLine(x, line.y1(), x, line.y2())
        self.label_item.moveBy(x - line.x1(), 0)

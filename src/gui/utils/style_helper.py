"""
Style Helper Module.

Provides centralized styling for the grant timeline: fixed palette tokens,
QSS strings for the surrounding widgets, and conversion of stored color
tokens (hex, named, or "hsl(h, s%, l%)") into QColor.
"""

import logging
import re

from PySide6.QtGui import QColor
from PySide6.QtWidgets import QLayout

logger = logging.getLogger(__name__)

PALETTE = {
    "app_bg": "#2B2B2B",
    "surface": "#323232",
    "border": "#454545",
    "primary": "#FF9900",
    "text_main": "#E0E0E0",
    "text_dim": "#9E9E9E",
    "error": "#CF6679",
    "grid": "#3C3C3C",
    "today": "#FF5252",
    "tooltip_bg": "#121212",
}

FALLBACK_COLOR = "#888888"

_HSL_TOKEN = re.compile(
    r"^\s*hsl\(\s*(\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)%\s*,\s*(\d+(?:\.\d+)?)%\s*\)\s*$"
)


def parse_color(token: str) -> QColor:
    """
    Converts a stored color token into a QColor.

    Supports "#rrggbb", SVG color names and "hsl(h, s%, l%)". Unparseable
    tokens fall back to grey rather than failing the paint.

    Args:
        token: The color token.

    Returns:
        QColor: A valid color.
    """
    if token:
        match = _HSL_TOKEN.match(token)
        if match:
            hue, saturation, lightness = (float(v) for v in match.groups())
            return QColor.fromHslF(
                (hue % 360) / 360.0,
                min(saturation, 100.0) / 100.0,
                min(lightness, 100.0) / 100.0,
            )
        color = QColor(token)
        if color.isValid():
            return color

    logger.debug(f"Unparseable color token {token!r}, using fallback")
    return QColor(FALLBACK_COLOR)


class StyleHelper:
    """
    Centralized style helper that provides QSS strings.

    All methods read from the fixed PALETTE so widgets stay consistent.
    """

    @staticmethod
    def get_empty_state_style() -> str:
        """
        Returns QSS for empty state labels.

        Empty state labels are shown when no grants are available
        or while the first snapshot is loading.

        Returns:
            str: QSS stylesheet string for empty state labels.
        """
        return f"color: {PALETTE['text_dim']}; font-size: 14pt; font-weight: bold;"

    @staticmethod
    def get_timeline_header_style() -> str:
        """
        Returns QSS for the timeline header holding the zoom buttons.

        Returns:
            str: QSS stylesheet string for timeline headers.
        """
        return (
            f"background-color: {PALETTE['surface']}; "
            f"border-bottom: 1px solid {PALETTE['border']}; "
            f"padding: 4px; font-weight: bold;"
        )

    @staticmethod
    def get_zoom_button_style() -> str:
        """
        Returns QSS for the checkable zoom mode buttons.

        The checked button uses the primary color.

        Returns:
            str: QSS stylesheet string for zoom buttons.
        """
        return (
            f"QPushButton {{ background-color: {PALETTE['surface']}; "
            f"color: {PALETTE['text_main']}; border: 1px solid {PALETTE['border']}; "
            f"padding: 4px 12px; font-weight: bold; }}"
            f"QPushButton:checked {{ background-color: {PALETTE['primary']}; "
            f"color: #121212; border: 1px solid {PALETTE['primary']}; }}"
        )

    @staticmethod
    def get_date_tooltip_style() -> str:
        """
        Returns QSS for the floating hover-date label.

        Returns:
            str: QSS stylesheet string for the tooltip label.
        """
        return (
            f"background-color: {PALETTE['tooltip_bg']}; "
            f"color: {PALETTE['text_main']}; "
            f"border: 1px solid {PALETTE['border']}; "
            f"padding: 2px 6px; font-weight: bold;"
        )

    @staticmethod
    def get_destructive_button_style() -> str:
        """
        Returns QSS for destructive action buttons.

        Destructive buttons (delete) use the error color.

        Returns:
            str: QSS stylesheet string for destructive buttons.
        """
        return (
            f"QPushButton {{ background-color: {PALETTE['error']}; "
            f"color: white; border: 1px solid {PALETTE['error']}; "
            f"border-radius: 4px; padding: 2px 6px; }}"
            f"QPushButton:hover {{ background-color: {PALETTE['border']}; "
            f"color: {PALETTE['text_main']}; }}"
        )

    @staticmethod
    def apply_no_margins(layout: QLayout) -> None:
        """
        Removes margins and spacing from a layout.

        Args:
            layout: The QLayout to configure.
        """
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

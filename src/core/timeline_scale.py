"""
Timeline Scale Module.

Computes the visible date window for a set of grants and maps between
calendar dates and horizontal pixel offsets on the drawing surface.

- ZoomMode selects surface width, padding rule, grid interval and labels.
- calculate_scale() pads the [earliest start, latest end] window per mode.
- CoordinateMapper is a pair of exact inverse linear transforms.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from src.core.dates import add_days, days_between, today_utc, utc_date

logger = logging.getLogger(__name__)

ROW_HEIGHT = 50
ROW_GAP = 0  # Tight layout, rows touch

# Days added on both ends of a single-instant board in monthly mode,
# where the 10% rule would otherwise produce an empty window.
MIN_PROPORTIONAL_PAD_DAYS = 1.0

# Fixed length of the default (empty board) window, leap years included.
EMPTY_WINDOW_DAYS = 365.0


class ZoomMode(Enum):
    """
    Timeline resolution.

    Finer resolutions get a wider surface to keep labels readable.
    """

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SIX_MONTHS = "6months"
    YEARLY = "yearly"

    @classmethod
    def from_value(cls, value) -> "ZoomMode":
        """
        Resolves a stored value to a ZoomMode.

        Args:
            value: A ZoomMode or its string value.

        Returns:
            ZoomMode: The matching mode, MONTHLY for unknown values.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            logger.warning(f"Unknown zoom mode {value!r}, falling back to monthly")
            return cls.MONTHLY

    @property
    def timeline_width(self) -> int:
        """Pixel width of the drawing surface."""
        return _TIMELINE_WIDTHS[self]

    @property
    def grid_interval_days(self) -> int:
        """Days between consecutive gridlines."""
        return _GRID_INTERVALS[self]

    @property
    def display_name(self) -> str:
        """Button caption."""
        return _DISPLAY_NAMES[self]


_TIMELINE_WIDTHS = {
    ZoomMode.WEEKLY: 3000,
    ZoomMode.MONTHLY: 2400,
    ZoomMode.SIX_MONTHS: 1800,
    ZoomMode.YEARLY: 1400,
}

_GRID_INTERVALS = {
    ZoomMode.WEEKLY: 7,
    ZoomMode.MONTHLY: 30,
    ZoomMode.SIX_MONTHS: 30,
    ZoomMode.YEARLY: 90,  # Quarterly
}

_DISPLAY_NAMES = {
    ZoomMode.WEEKLY: "WEEKLY",
    ZoomMode.MONTHLY: "MONTHLY",
    ZoomMode.SIX_MONTHS: "6 MONTHS",
    ZoomMode.YEARLY: "YEARLY",
}


@dataclass(frozen=True)
class Padding:
    """Pixel margins around the plotted area."""

    left: float = 20
    right: float = 100
    top: float = 60
    bottom: float = 20


DEFAULT_PADDING = Padding()


@dataclass(frozen=True)
class ScaleWindow:
    """
    The padded date window of one render pass.

    Attributes:
        min_date: Left edge of the plotted area.
        max_date: Right edge of the plotted area.
        total_days: Window length in fractional days.
    """

    min_date: datetime
    max_date: datetime
    total_days: float


def surface_height(row_count: int, padding: Padding = DEFAULT_PADDING) -> float:
    """
    Height of the drawing surface for a number of rows.

    Args:
        row_count: Number of grant rows.
        padding: Layout padding.

    Returns:
        float: Height in pixels.
    """
    return padding.top + row_count * (ROW_HEIGHT + ROW_GAP) + padding.bottom


def row_top(index: int, padding: Padding = DEFAULT_PADDING) -> float:
    """Returns the y offset of the row at index."""
    return padding.top + index * (ROW_HEIGHT + ROW_GAP)


def _pad_days(mode: ZoomMode, span_days: float) -> float:
    """Returns the additive pad applied on each side of the window."""
    if mode == ZoomMode.WEEKLY:
        return 7.0
    if mode == ZoomMode.SIX_MONTHS:
        return 30.0
    if mode == ZoomMode.YEARLY:
        return 60.0
    pad = span_days * 0.1
    if pad <= 0:
        pad = MIN_PROPORTIONAL_PAD_DAYS
    return pad


def calculate_scale(
    grants: Iterable, mode: ZoomMode, now: Optional[datetime] = None
) -> ScaleWindow:
    """
    Calculates the padded date window for a set of grants.

    An empty board shows the current year with a fixed 365-day length.
    Otherwise the window spans the earliest start to the latest end,
    padded on both sides according to the zoom mode.

    Args:
        grants: Objects with start_date and end_date attributes.
        mode: Active ZoomMode.
        now: Reference instant for the empty-board year (defaults to today).

    Returns:
        ScaleWindow: The padded window; total_days is always positive.
    """
    grant_list = list(grants)

    if not grant_list:
        if now is None:
            now = today_utc()
        return ScaleWindow(
            min_date=utc_date(now.year, 1, 1),
            max_date=utc_date(now.year, 12, 31),
            total_days=EMPTY_WINDOW_DAYS,
        )

    min_date = min(min(g.start_date, g.end_date) for g in grant_list)
    max_date = max(max(g.start_date, g.end_date) for g in grant_list)

    span_days = days_between(min_date, max_date)
    pad = _pad_days(mode, span_days)

    padded_min = add_days(min_date, -pad)
    padded_max = add_days(max_date, pad)
    total_days = days_between(padded_min, padded_max)

    logger.debug(
        f"Scale for {len(grant_list)} grants ({mode.value}): "
        f"span={span_days:.2f}d pad={pad:.2f}d total={total_days:.2f}d"
    )

    return ScaleWindow(min_date=padded_min, max_date=padded_max, total_days=total_days)


class CoordinateMapper:
    """
    Maps calendar dates to x offsets on the drawing surface and back.

    No clamping is applied: dates outside the window map outside the
    plotted area. Callers clamp where it matters (e.g. dragging).
    """

    def __init__(
        self, width: float, padding: Padding, scale: ScaleWindow
    ) -> None:
        """
        Initializes the mapper.

        Args:
            width: Full surface width in pixels.
            padding: Layout padding.
            scale: The current ScaleWindow.
        """
        self.width = width
        self.padding = padding
        self.scale = scale

    @property
    def available_width(self) -> float:
        """Width of the plotted area between left and right padding."""
        return self.width - self.padding.left - self.padding.right

    def date_to_x(self, value: datetime) -> float:
        """
        Converts a date to an x offset.

        Args:
            value: Aware UTC datetime.

        Returns:
            float: Pixel offset from the surface's left edge.
        """
        days_since_min = days_between(self.scale.min_date, value)
        ratio = days_since_min / self.scale.total_days
        return self.padding.left + ratio * self.available_width

    def x_to_date(self, x: float) -> datetime:
        """
        Converts an x offset back to a date.

        Args:
            x: Pixel offset from the surface's left edge.

        Returns:
            datetime: Aware UTC datetime (may carry a time-of-day fraction).
        """
        ratio = (x - self.padding.left) / self.available_width
        return add_days(self.scale.min_date, ratio * self.scale.total_days)

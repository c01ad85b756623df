"""
Timeline Grid Module.

Provides the calendar grid for the grant timeline:
- Fixed, mode-dependent gridline interval (weekly/monthly/quarterly)
- Mode-dependent label format
- Coverage of the full scale window, closing line at or after max_date
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List

from src.core.dates import add_days, format_month, format_month_year, format_short
from src.core.timeline_scale import ScaleWindow, ZoomMode

logger = logging.getLogger(__name__)

# Safety limit for very long windows at fine resolution
MAX_GRID_LINES = 2000

# Floating point slack when a line lands exactly on max_date
_EPSILON_DAYS = 1e-9


@dataclass(frozen=True)
class GridLine:
    """
    A single vertical gridline.

    Attributes:
        date: Date the line is drawn at.
        offset_days: Days since the window's min_date.
        label: Display text for the line.
    """

    date: datetime
    offset_days: float
    label: str


LABEL_FORMATTERS: Dict[ZoomMode, Callable[[datetime], str]] = {
    ZoomMode.WEEKLY: format_short,
    ZoomMode.MONTHLY: format_month_year,
    ZoomMode.SIX_MONTHS: format_month,
    ZoomMode.YEARLY: format_month_year,
}


def grid_line_count(total_days: float, interval_days: float) -> int:
    """
    Number of lines needed to cover a window.

    Args:
        total_days: Window length in days.
        interval_days: Days between lines.

    Returns:
        int: ceil(total_days / interval) + 1, at least 1.
    """
    if total_days <= 0 or interval_days <= 0:
        return 1
    steps = math.ceil(total_days / interval_days - _EPSILON_DAYS)
    return max(steps, 0) + 1


def generate_grid(scale: ScaleWindow, mode: ZoomMode) -> List[GridLine]:
    """
    Generates gridlines for a scale window.

    Lines start at min_date and step forward by the mode's interval until
    one lands at or after max_date.

    Args:
        scale: The current ScaleWindow.
        mode: Active ZoomMode.

    Returns:
        List of GridLine objects in strictly increasing date order.
    """
    interval = mode.grid_interval_days
    formatter = LABEL_FORMATTERS[mode]

    count = grid_line_count(scale.total_days, interval)
    if count > MAX_GRID_LINES:
        logger.warning(
            f"Grid for {scale.total_days:.0f} days in {mode.value} mode needs "
            f"{count} lines, truncating to {MAX_GRID_LINES}"
        )
        count = MAX_GRID_LINES

    lines: List[GridLine] = []
    for index in range(count):
        offset = index * interval
        line_date = add_days(scale.min_date, offset)
        if lines and line_date <= lines[-1].date:
            # Saturated at the end of the calendar
            break
        lines.append(
            GridLine(date=line_date, offset_days=float(offset), label=formatter(line_date))
        )

    logger.debug(f"Generated {len(lines)} gridlines ({mode.value}, every {interval}d)")
    return lines

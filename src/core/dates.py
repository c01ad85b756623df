"""
Date Utilities Module.

All timeline arithmetic works on timezone-aware UTC datetimes. A calendar
date is represented as midnight UTC of that day, so layout never depends on
the local clock of the viewer.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Union

SECONDS_PER_DAY = 24 * 60 * 60

# Bounds of representable aware datetimes; date arithmetic saturates here
MIN_UTC = datetime.min.replace(tzinfo=timezone.utc)
MAX_UTC = datetime.max.replace(tzinfo=timezone.utc)

MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

DateLike = Union[datetime, date, str]


def utc_date(year: int, month: int, day: int) -> datetime:
    """
    Builds a calendar date as midnight UTC.

    Args:
        year: Calendar year.
        month: Month number (1-12).
        day: Day of month.

    Returns:
        datetime: Timezone-aware datetime at 00:00 UTC.
    """
    return datetime(year, month, day, tzinfo=timezone.utc)


def to_utc(value: DateLike) -> datetime:
    """
    Normalizes a date-like value into an aware UTC datetime.

    Naive datetimes are interpreted as UTC. Plain dates become midnight UTC.
    Strings are parsed as ISO-8601 (a trailing 'Z' is accepted).

    Args:
        value: datetime, date, or ISO-8601 string.

    Returns:
        datetime: Timezone-aware UTC datetime.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time(0, 0), tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"Invalid date string: {value!r}") from e
        return to_utc(parsed)
    raise ValueError(f"Unsupported date value: {value!r}")


def days_between(start: datetime, end: datetime) -> float:
    """Returns the signed number of (fractional) days from start to end."""
    return (end - start).total_seconds() / SECONDS_PER_DAY


def add_days(value: datetime, days: float) -> datetime:
    """
    Returns value shifted by a (fractional) number of days.

    Results beyond the datetime range saturate at MIN_UTC or MAX_UTC, so
    grants dated near year 1 or year 9999 still lay out.
    """
    try:
        return value + timedelta(days=days)
    except OverflowError:
        return MAX_UTC if days > 0 else MIN_UTC


def today_utc() -> datetime:
    """Returns midnight UTC of the current day."""
    now = datetime.now(timezone.utc)
    return utc_date(now.year, now.month, now.day)


def format_date(value: datetime) -> str:
    """
    Formats a date for tooltips and details, e.g. "Jan 5, 2026".
    """
    return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.day}, {value.year}"


def format_short(value: datetime) -> str:
    """Formats as "Jan 5"."""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.day}"


def format_month_year(value: datetime) -> str:
    """Formats as "Jan 2026"."""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.year}"


def format_month(value: datetime) -> str:
    """Formats as "Jan"."""
    return MONTH_ABBREVIATIONS[value.month - 1]

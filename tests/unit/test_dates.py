"""
Unit tests for the UTC date helpers.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.core.dates import (
    MAX_UTC,
    MIN_UTC,
    add_days,
    days_between,
    format_date,
    format_month,
    format_month_year,
    format_short,
    to_utc,
    today_utc,
    utc_date,
)


def test_utc_date_is_midnight_utc():
    d = utc_date(2026, 1, 5)
    assert d.tzinfo == timezone.utc
    assert (d.hour, d.minute, d.second) == (0, 0, 0)


def test_to_utc_accepts_naive_datetime_as_utc():
    assert to_utc(datetime(2026, 1, 5, 12, 0)) == datetime(
        2026, 1, 5, 12, 0, tzinfo=timezone.utc
    )


def test_to_utc_converts_other_offsets():
    plus_two = timezone(timedelta(hours=2))
    value = datetime(2026, 1, 5, 1, 0, tzinfo=plus_two)
    assert to_utc(value) == datetime(2026, 1, 4, 23, 0, tzinfo=timezone.utc)


def test_to_utc_accepts_plain_date():
    assert to_utc(date(2026, 3, 1)) == utc_date(2026, 3, 1)


@pytest.mark.parametrize(
    "text",
    ["2026-03-01", "2026-03-01T00:00:00Z", "2026-03-01T00:00:00+00:00"],
)
def test_to_utc_parses_iso_strings(text):
    assert to_utc(text) == utc_date(2026, 3, 1)


def test_to_utc_rejects_garbage():
    with pytest.raises(ValueError):
        to_utc("not a date")
    with pytest.raises(ValueError):
        to_utc(12345)


def test_days_between_is_signed_and_fractional():
    start = utc_date(2026, 1, 1)
    assert days_between(start, utc_date(2026, 1, 11)) == 10
    assert days_between(utc_date(2026, 1, 11), start) == -10
    assert days_between(start, add_days(start, 0.5)) == pytest.approx(0.5)


def test_today_utc_has_no_time_of_day():
    today = today_utc()
    assert today.tzinfo == timezone.utc
    assert today.hour == 0 and today.minute == 0


def test_formatters_use_fixed_english_abbreviations():
    d = utc_date(2026, 1, 5)
    assert format_date(d) == "Jan 5, 2026"
    assert format_short(d) == "Jan 5"
    assert format_month_year(d) == "Jan 2026"
    assert format_month(utc_date(2026, 12, 31)) == "Dec"


def test_add_days_saturates_at_datetime_bounds():
    assert add_days(utc_date(1, 1, 2), -7) == MIN_UTC
    assert add_days(utc_date(9999, 12, 30), 60) == MAX_UTC
    assert add_days(utc_date(2026, 1, 1), 1e12) == MAX_UTC
    assert MIN_UTC.tzinfo == timezone.utc

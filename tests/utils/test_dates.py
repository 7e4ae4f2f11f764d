"""Tests for the calendar-day helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from taskflow.utils.clock import FixedClock, SystemClock
from taskflow.utils.dates import (
    coerce_date,
    coerce_datetime,
    days_between,
    end_of_month,
    parse_date_option,
    start_of_next_month,
    start_of_week,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (datetime(2024, 6, 10, 23, 59), date(2024, 6, 10)),
        (date(2024, 6, 10), date(2024, 6, 10)),
        ("2024-06-10", date(2024, 6, 10)),
        ("2024-06-10T08:00:00Z", date(2024, 6, 10)),
        ("not a date", None),
        ("", None),
        (None, None),
        (42, None),
    ],
)
def test_coerce_date(value, expected):
    assert coerce_date(value) == expected


def test_coerce_datetime_keeps_time_and_zone():
    assert coerce_datetime("2024-06-10T08:30:00Z") == datetime(2024, 6, 10, 8, 30, tzinfo=UTC)
    assert coerce_datetime(date(2024, 6, 10)) == datetime(2024, 6, 10)
    assert coerce_datetime("garbage") is None


def test_parse_date_option():
    assert parse_date_option("2024-06-10") == datetime(2024, 6, 10)
    assert parse_date_option("today").date() == SystemClock().today()
    assert (parse_date_option("tomorrow") - parse_date_option("today")).days == 1
    with pytest.raises(ValueError, match="Invalid date"):
        parse_date_option("someday")


def test_days_between_ignores_time_of_day():
    assert days_between(datetime(2024, 6, 10, 23, 0), datetime(2024, 6, 11, 1, 0)) == 1
    assert days_between(date(2024, 6, 12), date(2024, 6, 10)) == -2


@pytest.mark.parametrize(
    ("week_starts_on", "expected"),
    [(0, date(2024, 6, 10)), (6, date(2024, 6, 9)), (2, date(2024, 6, 12))],
)
def test_start_of_week(week_starts_on, expected):
    # 2024-06-12 is a Wednesday
    assert start_of_week(date(2024, 6, 12), week_starts_on) == expected


def test_month_boundaries():
    assert start_of_next_month(date(2024, 12, 15)) == date(2025, 1, 1)
    assert end_of_month(date(2024, 2, 10)) == date(2024, 2, 29)


def test_relative_dates_follow_the_clock():
    # 23:30 UTC is already the next day in some local zones
    clock = FixedClock(datetime(2024, 6, 10, 23, 30, tzinfo=UTC))

    assert parse_date_option("today", clock) == datetime(2024, 6, 10)
    assert parse_date_option("tomorrow", clock) == datetime(2024, 6, 11)
    assert parse_date_option("yesterday", clock) == datetime(2024, 6, 9)

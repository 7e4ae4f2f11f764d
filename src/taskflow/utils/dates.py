"""Calendar-day helpers shared by the timeline and the cascade.

All scheduling arithmetic happens on calendar days: a timestamp contributes
its ``date()`` and time-of-day is ignored when counting days.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from taskflow.utils.clock import Clock, SystemClock

# Sentinel used when sorting tasks without a due date
FAR_FUTURE = datetime(2099, 12, 31)


def coerce_date(value: object) -> date | None:
    """Return the calendar day of *value*, or None if it cannot be parsed.

    Accepts ``datetime``, ``date`` and ISO-8601 strings (a trailing ``Z`` is
    understood). Anything else, including malformed strings, yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def coerce_datetime(value: object) -> datetime | None:
    """Like :func:`coerce_date` but keeps time and tzinfo when present."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def parse_date_option(value: str, clock: Clock | None = None) -> datetime:
    """Parse a user-supplied date option (``today``, ``tomorrow`` or ISO).

    Relative names are resolved against *clock*, the system clock by default.
    """
    lowered = value.strip().lower()
    today = datetime.combine((clock or SystemClock()).today(), time.min)
    if lowered == "today":
        return today
    if lowered == "tomorrow":
        return today + timedelta(days=1)
    if lowered == "yesterday":
        return today - timedelta(days=1)
    parsed = coerce_datetime(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
    return parsed


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar days from *start* to *end* (negative if end is earlier)."""
    start_day = start.date() if isinstance(start, datetime) else start
    end_day = end.date() if isinstance(end, datetime) else end
    return (end_day - start_day).days


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def start_of_week(value: date, week_starts_on: int = 0) -> date:
    """First day of the week containing *value* (0=Monday ... 6=Sunday)."""
    offset = (value.weekday() - week_starts_on) % 7
    return value - timedelta(days=offset)


def start_of_month(value: date) -> date:
    return value.replace(day=1)


def start_of_next_month(value: date) -> date:
    if value.month == 12:
        return date(value.year + 1, 1, 1)
    return date(value.year, value.month + 1, 1)


def end_of_month(value: date) -> date:
    """Last day of the month containing *value*."""
    return start_of_next_month(value) - timedelta(days=1)

"""Timeline layout - positions tasks on a zoomable calendar window.

Everything here is a pure function of its arguments and safe to call on every
render pass. Offsets and durations are in whole days; multiply by the
window's ``day_width`` for display units.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, datetime
from typing import Literal

from taskflow.models import (
    PRIORITY_RANK,
    InvalidZoomLevelError,
    Task,
    TimelineItem,
    TimelineLayout,
    TimelineWindow,
)
from taskflow.models.timeline import TimelineSort, ZoomLevel
from taskflow.utils.clock import Clock, SystemClock
from taskflow.utils.dates import (
    add_days,
    coerce_date,
    days_between,
    end_of_month,
    start_of_month,
    start_of_next_month,
    start_of_week,
)

DAY_WIDTHS: dict[str, int] = {"day": 120, "week": 60, "month": 30}
NAVIGATION_STEPS: dict[str, int] = {"day": 7, "week": 14, "month": 30}

DAY_WINDOW_DAYS = 7
WEEK_WINDOW_DAYS = 28
MONTH_LOOKAHEAD_DAYS = 60

Direction = Literal["prev", "next"]


def _check_zoom(zoom: str) -> None:
    if zoom not in DAY_WIDTHS:
        raise InvalidZoomLevelError(zoom)


def _as_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def compute_window(
    anchor: date | datetime,
    zoom: ZoomLevel,
    week_starts_on: int = 0,
) -> TimelineWindow:
    """Visible ``[start, end)`` window for *anchor* at *zoom*.

    - day: 7 days starting at the anchor
    - week: 28 days starting at the first day of the anchor's week
    - month: first day of the anchor's month through the end of the month
      containing ``start + 60 days``
    """
    _check_zoom(zoom)
    anchor_day = _as_day(anchor)

    if zoom == "day":
        start = anchor_day
        end = add_days(start, DAY_WINDOW_DAYS)
    elif zoom == "week":
        start = start_of_week(anchor_day, week_starts_on)
        end = add_days(start, WEEK_WINDOW_DAYS)
    else:
        start = start_of_month(anchor_day)
        end = start_of_next_month(end_of_month(add_days(start, MONTH_LOOKAHEAD_DAYS)))

    return TimelineWindow(
        start=start,
        end=end,
        days=(end - start).days,
        day_width=DAY_WIDTHS[zoom],
        zoom=zoom,
    )


def task_span(task: Task) -> tuple[date, date] | None:
    """Calendar span of a task, or None if it cannot be placed.

    A task with only one date collapses to that day. Tasks without dates or
    with unparsable dates are not placeable.
    """
    if task.start_date is None and task.due_date is None:
        return None
    start = coerce_date(task.start_date if task.start_date is not None else task.due_date)
    end = coerce_date(task.due_date) if task.due_date is not None else start
    if start is None or end is None:
        return None
    return start, end


def position_task(task: Task, window: TimelineWindow) -> TimelineItem | None:
    """Offset and duration of *task* relative to *window*, or None if ineligible."""
    span = task_span(task)
    if span is None:
        return None
    start, end = span
    return TimelineItem(
        task=task,
        task_start=start,
        task_end=end,
        start_offset=max(0, days_between(window.start, start)),
        duration=max(1, days_between(start, end) + 1),
    )


def _title_key(item: TimelineItem) -> str:
    return item.task.title.casefold()


SORT_KEYS: dict[str, Callable[[TimelineItem], object]] = {
    "start": lambda item: item.start_offset,
    "priority": lambda item: -PRIORITY_RANK.get(item.task.priority, 0),
    "title": _title_key,
}


def layout(
    tasks: Iterable[Task],
    zoom: ZoomLevel,
    anchor: date | datetime,
    sort: TimelineSort = "start",
    week_starts_on: int = 0,
) -> TimelineLayout:
    """Compute the window and the positioned, ordered items for *tasks*.

    Ordering is stable: ties keep the order of *tasks*.
    """
    if sort not in SORT_KEYS:
        raise ValueError(f"Unknown timeline sort: {sort!r}")
    window = compute_window(anchor, zoom, week_starts_on)
    items = [item for task in tasks if (item := position_task(task, window)) is not None]
    items.sort(key=SORT_KEYS[sort])
    return TimelineLayout(window=window, items=items)


def header_dates(window: TimelineWindow) -> list[date]:
    """Every day shown in the window header."""
    return [add_days(window.start, offset) for offset in range(window.days)]


def navigate(anchor: date | datetime, zoom: ZoomLevel, direction: Direction) -> date:
    """Shift *anchor* one page backwards or forwards for *zoom*."""
    _check_zoom(zoom)
    if direction not in ("prev", "next"):
        raise ValueError(f"Unknown direction: {direction!r}")
    step = NAVIGATION_STEPS[zoom]
    return add_days(_as_day(anchor), step if direction == "next" else -step)


def today(clock: Clock | None = None) -> date:
    """Anchor for "jump to today"."""
    return (clock or SystemClock()).today()


def drop_dates(
    window: TimelineWindow,
    item: TimelineItem,
    drop_x: float,
    grab_offset_x: float = 0.0,
) -> tuple[date, date]:
    """Dates for a task bar dropped at horizontal position *drop_x*.

    The day index is rounded to the nearest column and clamped at the window
    start; the bar keeps its duration.
    """
    day_index = max(0, round((drop_x - grab_offset_x) / window.day_width))
    new_start = add_days(window.start, day_index)
    return new_start, add_days(new_start, item.duration - 1)


class TimelineLayoutEngine:
    """Timeline functions bound to a week-start convention and a clock."""

    def __init__(self, week_starts_on: int = 0, clock: Clock | None = None):
        self.week_starts_on = week_starts_on
        self.clock = clock or SystemClock()

    def window(self, anchor: date | datetime, zoom: ZoomLevel) -> TimelineWindow:
        return compute_window(anchor, zoom, self.week_starts_on)

    def layout(
        self,
        tasks: Iterable[Task],
        zoom: ZoomLevel,
        anchor: date | datetime | None = None,
        sort: TimelineSort = "start",
    ) -> TimelineLayout:
        return layout(
            tasks,
            zoom,
            anchor if anchor is not None else self.today(),
            sort=sort,
            week_starts_on=self.week_starts_on,
        )

    def navigate(self, anchor: date | datetime, zoom: ZoomLevel, direction: Direction) -> date:
        return navigate(anchor, zoom, direction)

    def today(self) -> date:
        return today(self.clock)

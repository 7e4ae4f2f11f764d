"""Timeline layout models."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from .core import Task

ZoomLevel = Literal["day", "week", "month"]
TimelineSort = Literal["start", "priority", "title"]


class TimelineWindow(BaseModel):
    """Visible date range of the timeline.

    Attributes:
        start: First visible day
        end: First day after the window (exclusive)
        days: Number of visible days
        day_width: Display units per day for the zoom level
        zoom: Zoom level the window was computed for
    """

    start: date
    end: date
    days: int
    day_width: int
    zoom: ZoomLevel

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


class TimelineItem(BaseModel):
    """A task positioned on the timeline, in day units."""

    task: Task
    task_start: date
    task_end: date
    start_offset: int
    duration: int


class TimelineLayout(BaseModel):
    """Window plus positioned items, in display order."""

    window: TimelineWindow
    items: list[TimelineItem] = Field(default_factory=list)

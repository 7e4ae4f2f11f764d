"""Error taxonomy for the scheduling core.

Every error carries a short ``kind`` and a message fit to show a user
verbatim; the attributes hold the ids, titles and dates it was built from.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from taskflow.models.schedule import RescheduleReport


def _day(value: date | datetime | None) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def _label(task_id: str, title: str | None) -> str:
    return f"'{title}' ({task_id})" if title else task_id


class TaskflowError(Exception):
    """Base exception for all taskflow errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TaskNotFoundError(TaskflowError):
    """Raised when a referenced task id does not exist."""

    kind = "task_not_found"

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


# Name used by the store contract
NotFoundError = TaskNotFoundError


class SelfDependencyError(TaskflowError):
    """Raised when a task would depend on itself."""

    kind = "self_dependency"

    def __init__(self, task_id: str, title: str | None = None):
        super().__init__(f"Task {_label(task_id, title)} cannot depend on itself")
        self.task_id = task_id
        self.title = title


class CircularDependencyError(TaskflowError):
    """Raised when adding an edge would close a cycle."""

    kind = "circular_dependency"

    def __init__(
        self,
        source_id: str,
        target_id: str,
        source_title: str | None = None,
        target_title: str | None = None,
    ):
        super().__init__(
            f"Making {_label(target_id, target_title)} depend on "
            f"{_label(source_id, source_title)} would create a circular dependency"
        )
        self.source_id = source_id
        self.target_id = target_id


class InvalidDateRangeError(TaskflowError):
    """Raised when a start date falls after the due date."""

    kind = "invalid_date_range"

    def __init__(
        self,
        start_date: date | datetime,
        due_date: date | datetime,
        task_id: str | None = None,
    ):
        where = f" for task {task_id}" if task_id else ""
        super().__init__(
            f"Start date {_day(start_date)} is after due date {_day(due_date)}{where}"
        )
        self.start_date = start_date
        self.due_date = due_date
        self.task_id = task_id


class DependencyInUseError(TaskflowError):
    """Raised when deleting a task that other tasks still depend on."""

    kind = "dependency_in_use"

    def __init__(self, task_id: str, dependent_ids: list[str], title: str | None = None):
        super().__init__(
            f"Cannot delete {_label(task_id, title)}: still required by "
            f"{', '.join(dependent_ids)}"
        )
        self.task_id = task_id
        self.dependent_ids = list(dependent_ids)


class ConstraintViolationError(TaskflowError):
    """Raised (or recorded) when a cascaded date breaches a task constraint."""

    kind = "constraint_violation"

    def __init__(
        self,
        task_id: str,
        title: str | None,
        constraint: str,
        limit: date | datetime,
        proposed: date | datetime,
    ):
        readable = constraint.replace("_", " ")
        super().__init__(
            f"Cannot reschedule {_label(task_id, title)}: proposed "
            f"{'start' if constraint == 'max_start_date' else 'end'} "
            f"{_day(proposed)} exceeds {readable} {_day(limit)}"
        )
        self.task_id = task_id
        self.title = title
        self.constraint = constraint
        self.limit = limit
        self.proposed = proposed


class CascadeDepthExceededError(TaskflowError):
    """Recorded when a cascade branch goes deeper than the configured bound."""

    kind = "cascade_depth_exceeded"

    def __init__(self, task_id: str, title: str | None, max_depth: int):
        super().__init__(
            f"Cannot reschedule {_label(task_id, title)}: maximum cascade depth "
            f"of {max_depth} levels exceeded"
        )
        self.task_id = task_id
        self.title = title
        self.max_depth = max_depth


class InvalidZoomLevelError(TaskflowError):
    """Raised for a zoom level the timeline does not know."""

    kind = "invalid_zoom_level"

    def __init__(self, zoom: str):
        super().__init__(f"Unknown zoom level: {zoom!r} (expected day, week or month)")
        self.zoom = zoom


class CascadeError(TaskflowError):
    """Aggregate failure of a cascade.

    Successful updates listed in ``report.rescheduled`` stay committed.
    """

    kind = "cascade_failed"

    def __init__(self, report: RescheduleReport):
        lines = [f"{len(report.failures)} task(s) could not be rescheduled:"]
        lines.extend(f"- {failure.message}" for failure in report.failures)
        super().__init__("\n".join(lines))
        self.report = report

    @property
    def failures(self):
        return self.report.failures

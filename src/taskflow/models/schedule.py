"""Cascade reschedule report models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RescheduledTask(BaseModel):
    """One task moved by a cascade, with its range before and after."""

    task_id: str
    title: str
    old_start: datetime | None = None
    old_end: datetime | None = None
    new_start: datetime
    new_end: datetime
    depth: int = 1


class CascadeFailure(BaseModel):
    """A task the cascade could not move.

    Attributes:
        task_id: Task that was left untouched
        title: Its title, for messages
        kind: Error kind (constraint_violation, cascade_depth_exceeded, ...)
        message: Human readable reason
    """

    task_id: str
    title: str | None = None
    kind: str
    message: str


class RescheduleReport(BaseModel):
    """Outcome of a cascade run."""

    root_id: str
    new_end_date: datetime
    rescheduled: list[RescheduledTask] = Field(default_factory=list)
    failures: list[CascadeFailure] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures

    def rescheduled_ids(self) -> list[str]:
        return [entry.task_id for entry in self.rescheduled]


class DependencyStats(BaseModel):
    """Summary of the dependency graph of a task set.

    Attributes:
        tasks_with_dependencies: Tasks with at least one dependency
        average_dependencies: Mean dependency count among those tasks
        blocked_tasks: Tasks with at least one dependency not yet done
        critical_path: Task ids of the longest chain by summed duration
        critical_path_days: Summed duration of that chain
    """

    tasks_with_dependencies: int = 0
    average_dependencies: float = 0.0
    blocked_tasks: int = 0
    critical_path: list[str] = Field(default_factory=list)
    critical_path_days: int = 0

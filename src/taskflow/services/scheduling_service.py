"""Scheduling service - moves a task and cascades the change downstream."""

from __future__ import annotations

from datetime import datetime

from taskflow.models import RescheduleReport, Task, TaskNotFoundError, TaskUpdate
from taskflow.repositories import TaskRepository
from taskflow.services.reschedule import RescheduleCascader


class SchedulingService:
    """Applies a date change to one task, then runs the cascade from it."""

    def __init__(self, repository: TaskRepository, cascader: RescheduleCascader | None = None):
        self.repository = repository
        self.cascader = cascader or RescheduleCascader(repository)

    async def move_task(
        self,
        task_id: str,
        start_date: datetime | None,
        due_date: datetime | None,
        *,
        cascade: bool = True,
    ) -> tuple[Task, RescheduleReport | None]:
        """Set a task's dates and push its dependents after the new end.

        Returns:
            The updated task and the cascade report (None when cascade is off
            or the task ends up without any date)

        Raises:
            TaskNotFoundError: task_id is unknown
            InvalidDateRangeError: start_date is after due_date
            CascadeError: the task moved but some dependents could not
        """
        updated = await self.repository.update(
            task_id, TaskUpdate(start_date=start_date, due_date=due_date)
        )
        new_end = updated.due_date or updated.start_date
        if not cascade or new_end is None:
            return updated, None
        report = await self.cascader.reschedule(task_id, new_end)
        return updated, report

    async def set_due_date(
        self, task_id: str, due_date: datetime, *, cascade: bool = True
    ) -> tuple[Task, RescheduleReport | None]:
        """Change only the due date, keeping the start date."""
        task = await self.repository.get_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return await self.move_task(task_id, task.start_date, due_date, cascade=cascade)

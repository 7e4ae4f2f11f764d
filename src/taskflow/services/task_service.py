"""Task service - Business logic for task operations.

This service layer sits between commands and repositories, providing
a clean API for task-related business logic.
"""

from __future__ import annotations

from datetime import datetime

from taskflow.models import (
    Task,
    TaskConstraints,
    TaskCreate,
    TaskFilters,
    TaskNotFoundError,
    TaskUpdate,
)
from taskflow.repositories import TaskRepository
from taskflow.services.filters import filter_tasks
from taskflow.utils.clock import Clock, SystemClock
from taskflow.utils.dates import coerce_datetime


def _parse(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    parsed = coerce_datetime(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


class TaskService:
    """Service for task business logic.

    This service encapsulates business rules and orchestrates task operations
    using the task repository.
    """

    def __init__(self, task_repository: TaskRepository, clock: Clock | None = None):
        """Initialize the task service.

        Args:
            task_repository: TaskRepository implementation for data access
            clock: Clock used for date-range filters
        """
        self.repository = task_repository
        self.clock = clock or SystemClock()

    async def list_tasks(
        self,
        filters: TaskFilters | None = None,
        *,
        week_starts_on: int = 0,
        search_threshold: float | None = None,
    ) -> list[Task]:
        """List tasks, filtered and sorted.

        Args:
            filters: Filter, search and sort criteria (defaults: everything,
                sorted by due date)
            week_starts_on: First weekday for this-week / next-week ranges
            search_threshold: Optional fuzzy-match cut-off

        Returns:
            List of Task objects matching the criteria
        """
        tasks = await self.repository.get_all()
        kwargs = {} if search_threshold is None else {"threshold": search_threshold}
        return filter_tasks(
            tasks,
            filters or TaskFilters(),
            now=self.clock.now(),
            week_starts_on=week_starts_on,
            **kwargs,
        )

    async def get_task(self, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        task = await self.repository.get_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def resolve_task_id(self, task_id: str) -> str:
        """Resolve a full id or a unique id suffix to a full task id."""
        tasks = await self.repository.get_all()
        if any(task.id == task_id for task in tasks):
            return task_id
        matches = [task.id for task in tasks if task.id.endswith(task_id)]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise ValueError(
                f"Ambiguous task id '{task_id}' matches {len(matches)} tasks"
            )
        raise TaskNotFoundError(task_id)

    async def add_task(
        self,
        title: str,
        *,
        description: str | None = None,
        priority: str = "medium",
        task_type: str = "task",
        is_deadline: bool = False,
        start_date: str | datetime | None = None,
        due_date: str | datetime | None = None,
        max_start_date: str | datetime | None = None,
        max_end_date: str | datetime | None = None,
        project_id: str | None = None,
    ) -> Task:
        """Create a new task.

        Dates may be given as ISO strings or datetimes.

        Returns:
            Created Task object
        """
        constraints = None
        if max_start_date is not None or max_end_date is not None:
            constraints = TaskConstraints(
                max_start_date=_parse(max_start_date),
                max_end_date=_parse(max_end_date),
            )

        task_data = TaskCreate(
            title=title,
            description=description,
            priority=priority,
            type=task_type,
            is_deadline=is_deadline,
            start_date=_parse(start_date),
            due_date=_parse(due_date),
            constraints=constraints,
            project_id=project_id,
        )
        return await self.repository.create(task_data)

    async def update_task(self, task_id: str, **fields: object) -> Task:
        """Update an existing task with the given fields.

        Returns:
            Updated Task object
        """
        for key in ("start_date", "due_date"):
            if key in fields:
                fields[key] = _parse(fields[key])
        return await self.repository.update(task_id, TaskUpdate(**fields))

    async def complete_task(self, task_id: str) -> Task:
        """Mark a task as done (stamps completed_at)."""
        return await self.repository.update(task_id, TaskUpdate(status="done"))

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task.

        Raises:
            DependencyInUseError: If other tasks still depend on it
        """
        return await self.repository.delete(task_id)

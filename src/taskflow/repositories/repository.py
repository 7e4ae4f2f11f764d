"""Repository abstraction for task persistence.

The scheduling core only ever talks to this interface; concrete storage
(in-memory, SQLite) lives in :mod:`taskflow.adapters`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from taskflow.models import InvalidDateRangeError, Task, TaskCreate, TaskUpdate


def ensure_valid_date_range(
    start_date: datetime | None,
    due_date: datetime | None,
    task_id: str | None = None,
) -> None:
    """Raise InvalidDateRangeError if both dates are set and start is after due.

    Compared by calendar day so naive and aware timestamps can be mixed.
    """
    if start_date is None or due_date is None:
        return
    if start_date.date() > due_date.date():
        raise InvalidDateRangeError(start_date, due_date, task_id=task_id)


def find_dependents(tasks: list[Task], task_id: str) -> list[str]:
    """Ids of tasks whose dependencies list *task_id*, in store order."""
    return [task.id for task in tasks if task_id in task.dependencies]


class TaskRepository(ABC):
    """Abstract base class for task persistence operations.

    Implementations must return copies: mutating a returned Task never
    changes stored state.
    """

    @abstractmethod
    async def get_all(self) -> list[Task]:
        """List every task in insertion order.

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError(
            "TaskRepository.get_all() must be implemented by adapter"
        )

    @abstractmethod
    async def get_by_id(self, task_id: str) -> Task | None:
        """Get a task by id.

        Returns:
            The Task, or None if it does not exist
        """
        raise NotImplementedError(
            "TaskRepository.get_by_id() must be implemented by adapter"
        )

    @abstractmethod
    async def create(self, task_data: TaskCreate) -> Task:
        """Create a new task with a generated id and timestamps.

        Raises:
            InvalidDateRangeError: If start_date is after due_date
        """
        raise NotImplementedError(
            "TaskRepository.create() must be implemented by adapter"
        )

    @abstractmethod
    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """Apply the explicitly set fields of *updates*.

        Raises:
            TaskNotFoundError: If the task does not exist
            InvalidDateRangeError: If the resulting start_date is after due_date
        """
        raise NotImplementedError(
            "TaskRepository.update() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """Delete a task.

        Returns:
            True if deletion was successful

        Raises:
            TaskNotFoundError: If the task does not exist
            DependencyInUseError: If other tasks still depend on it
        """
        raise NotImplementedError(
            "TaskRepository.delete() must be implemented by adapter"
        )

    async def get_by_project(self, project_id: str) -> list[Task]:
        """List tasks belonging to a project."""
        return [t for t in await self.get_all() if t.project_id == project_id]

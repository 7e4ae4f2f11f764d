"""In-memory implementation of TaskRepository."""

from __future__ import annotations

import asyncio
import logging

from taskflow.models import (
    DependencyInUseError,
    Task,
    TaskCreate,
    TaskNotFoundError,
    TaskUpdate,
)
from taskflow.repositories import (
    TaskRepository,
    ensure_valid_date_range,
    find_dependents,
)
from taskflow.utils.clock import Clock, IdFactory, SystemClock, generate_task_id

logger = logging.getLogger(__name__)


def apply_update(task: Task, updates: TaskUpdate, clock: Clock) -> Task:
    """Return *task* with the explicitly set fields of *updates* applied.

    Moving into ``done`` stamps ``completed_at``; moving out of it clears it.
    """
    changes = updates.changes()
    merged = task.model_dump()
    merged.update(changes)

    new_status = changes.get("status")
    if new_status == "done" and task.status != "done":
        merged["completed_at"] = clock.now()
    elif new_status is not None and new_status != "done":
        merged["completed_at"] = None

    updated = Task.model_validate(merged)
    ensure_valid_date_range(updated.start_date, updated.due_date, task_id=task.id)
    return updated


class InMemoryTaskRepository(TaskRepository):
    """Task repository backed by a list held in process memory.

    Args:
        tasks: Optional initial records (copied)
        clock: Clock used for created_at / completed_at
        id_factory: Callable producing new task ids
        latency: Artificial delay in seconds applied to every call
    """

    def __init__(
        self,
        tasks: list[Task] | None = None,
        *,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
        latency: float = 0.0,
    ):
        self._tasks: list[Task] = [t.model_copy(deep=True) for t in tasks or []]
        self.clock = clock or SystemClock()
        self.id_factory = id_factory or generate_task_id
        self.latency = latency

    async def _delay(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    def _index(self, task_id: str) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise TaskNotFoundError(task_id)

    async def get_all(self) -> list[Task]:
        await self._delay()
        return [t.model_copy(deep=True) for t in self._tasks]

    async def get_by_id(self, task_id: str) -> Task | None:
        await self._delay()
        for task in self._tasks:
            if task.id == task_id:
                return task.model_copy(deep=True)
        return None

    async def create(self, task_data: TaskCreate) -> Task:
        await self._delay()
        ensure_valid_date_range(task_data.start_date, task_data.due_date)
        now = self.clock.now()
        task = Task(
            **task_data.model_dump(),
            id=self.id_factory(),
            dependencies=[],
            created_at=now,
            completed_at=now if task_data.status == "done" else None,
        )
        self._tasks.append(task)
        logger.debug("created task %s", task.id)
        return task.model_copy(deep=True)

    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        await self._delay()
        index = self._index(task_id)
        updated = apply_update(self._tasks[index], updates, self.clock)
        self._tasks[index] = updated
        return updated.model_copy(deep=True)

    async def delete(self, task_id: str) -> bool:
        await self._delay()
        index = self._index(task_id)
        dependents = find_dependents(self._tasks, task_id)
        if dependents:
            raise DependencyInUseError(
                task_id, dependents, title=self._tasks[index].title
            )
        del self._tasks[index]
        logger.debug("deleted task %s", task_id)
        return True

"""Dependency analytics over a task list."""

from __future__ import annotations

from collections import deque

from taskflow.models import DependencyStats, Task
from taskflow.repositories import TaskRepository
from taskflow.services.reschedule import task_duration


def topological_order(tasks: list[Task]) -> list[str] | None:
    """Prerequisites-first order of task ids, or None if the graph has a cycle.

    Dependencies on unknown ids are ignored; ties follow store order.
    """
    by_id = {task.id: task for task in tasks}
    pending = {
        task.id: sum(1 for dep in task.dependencies if dep in by_id) for task in tasks
    }
    dependents: dict[str, list[str]] = {}
    for task in tasks:
        for dep in task.dependencies:
            if dep in by_id:
                dependents.setdefault(dep, []).append(task.id)

    ready = deque(task.id for task in tasks if pending[task.id] == 0)
    order: list[str] = []
    while ready:
        task_id = ready.popleft()
        order.append(task_id)
        for child in dependents.get(task_id, []):
            pending[child] -= 1
            if pending[child] == 0:
                ready.append(child)
    return order if len(order) == len(tasks) else None


def critical_path(tasks: list[Task]) -> tuple[list[str], int]:
    """Longest dependency chain by summed task duration.

    Returns:
        (task ids from first prerequisite to last dependent, total days);
        empty when there are no tasks or the graph has a cycle
    """
    order = topological_order(tasks)
    if not order:
        return [], 0

    by_id = {task.id: task for task in tasks}
    total: dict[str, int] = {}
    previous: dict[str, str | None] = {}
    for task_id in order:
        task = by_id[task_id]
        prereqs = [dep for dep in task.dependencies if dep in by_id]
        best = max(prereqs, key=lambda dep: total[dep], default=None)
        total[task_id] = task_duration(task) + (total[best] if best else 0)
        previous[task_id] = best

    # First task in store order wins ties
    end = max(tasks, key=lambda task: total[task.id]).id
    path: list[str] = []
    node: str | None = end
    while node is not None:
        path.append(node)
        node = previous[node]
    path.reverse()
    return path, total[end]


def dependency_analysis(tasks: list[Task]) -> DependencyStats:
    """Counts of dependent and blocked tasks plus the critical path."""
    by_id = {task.id: task for task in tasks}
    with_deps = [task for task in tasks if task.dependencies]

    average = 0.0
    if with_deps:
        average = sum(len(task.dependencies) for task in with_deps) / len(with_deps)

    blocked = sum(
        1
        for task in with_deps
        if any(dep in by_id and by_id[dep].status != "done" for dep in task.dependencies)
    )

    path, days = critical_path(tasks)
    return DependencyStats(
        tasks_with_dependencies=len(with_deps),
        average_dependencies=average,
        blocked_tasks=blocked,
        critical_path=path,
        critical_path_days=days,
    )


class AnalyticsService:
    """Reads the task store and summarises its dependency graph."""

    def __init__(self, task_repository: TaskRepository):
        self.repository = task_repository

    async def get_dependency_analysis(self) -> DependencyStats:
        return dependency_analysis(await self.repository.get_all())

"""Reschedule cascade - pushes dependents forward when a task's end moves.

Each dependent starts the day after its latest-ending moved prerequisite and
keeps its duration. A dependent whose new dates would breach its own
constraints, exceed the depth bound or fail to persist is left untouched and
its own dependents are not moved; sibling branches carry on. Writes already
made stay committed when other branches fail.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import date, datetime, timedelta

from taskflow.models import (
    CascadeDepthExceededError,
    CascadeError,
    CascadeFailure,
    ConstraintViolationError,
    RescheduledTask,
    RescheduleReport,
    Task,
    TaskflowError,
    TaskNotFoundError,
    TaskUpdate,
)
from taskflow.repositories import TaskRepository
from taskflow.utils.dates import coerce_datetime, days_between

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


def task_duration(task: Task) -> int:
    """Inclusive whole-day duration, at least 1; undated tasks count as 1."""
    start = task.start_date if task.start_date is not None else task.due_date
    end = task.due_date if task.due_date is not None else task.start_date
    if start is None or end is None:
        return 1
    return max(1, days_between(start, end) + 1)


def propose_dates(task: Task, prerequisite_end: datetime) -> tuple[datetime, datetime]:
    """New (start, end) placing *task* right after *prerequisite_end*."""
    new_start = prerequisite_end + timedelta(days=1)
    return new_start, new_start + timedelta(days=task_duration(task) - 1)


def check_constraints(
    task: Task, new_start: datetime, new_end: datetime
) -> ConstraintViolationError | None:
    """The first constraint the proposed range breaches, compared by day."""
    constraints = task.constraints
    if constraints is None:
        return None
    if (
        constraints.max_start_date is not None
        and new_start.date() > constraints.max_start_date.date()
    ):
        return ConstraintViolationError(
            task.id, task.title, "max_start_date", constraints.max_start_date, new_start
        )
    if (
        constraints.max_end_date is not None
        and new_end.date() > constraints.max_end_date.date()
    ):
        return ConstraintViolationError(
            task.id, task.title, "max_end_date", constraints.max_end_date, new_end
        )
    return None


def _failure(task: Task, error: TaskflowError) -> CascadeFailure:
    return CascadeFailure(
        task_id=task.id, title=task.title, kind=error.kind, message=error.message
    )


class RescheduleCascader:
    """Cascades a changed end date through all transitive dependents.

    Args:
        repository: Store used to read tasks and persist new dates
        max_depth: Deepest dependency level that may be moved
        merge_converging: When True a task reached through several
            prerequisites is moved once, after all of them, from the latest
            of their new end dates. When False every incoming branch moves it
            in turn and the last write wins.
    """

    def __init__(
        self,
        repository: TaskRepository,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        merge_converging: bool = True,
    ):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.repository = repository
        self.max_depth = max_depth
        self.merge_converging = merge_converging

    async def reschedule(
        self, task_id: str, new_end_date: date | datetime | str
    ) -> RescheduleReport:
        """Move every dependent of *task_id* after *new_end_date*.

        Returns:
            Report of rescheduled tasks with their before/after ranges

        Raises:
            TaskNotFoundError: task_id is unknown
            CascadeError: one or more dependents could not be moved; the
                report on the error lists what did move
        """
        report = await self._run(task_id, new_end_date, dry_run=False)
        if report.failures:
            raise CascadeError(report)
        return report

    async def preview(
        self, task_id: str, new_end_date: date | datetime | str
    ) -> RescheduleReport:
        """Compute the cascade without writing anything or raising on failures."""
        return await self._run(task_id, new_end_date, dry_run=True)

    async def _run(
        self, task_id: str, new_end_date: date | datetime | str, *, dry_run: bool
    ) -> RescheduleReport:
        anchor = coerce_datetime(new_end_date)
        if anchor is None:
            raise ValueError(f"Invalid end date: {new_end_date!r}")

        tasks = await self.repository.get_all()
        by_id = {task.id: task for task in tasks}
        if task_id not in by_id:
            raise TaskNotFoundError(task_id)

        dependents: dict[str, list[str]] = {}
        for task in tasks:
            for dep in task.dependencies:
                dependents.setdefault(dep, []).append(task.id)

        report = RescheduleReport(root_id=task_id, new_end_date=anchor, dry_run=dry_run)
        logger.debug(
            "cascade from %s to %s (merge=%s, dry_run=%s)",
            task_id,
            anchor.date(),
            self.merge_converging,
            dry_run,
        )
        if self.merge_converging:
            await self._cascade_merged(task_id, anchor, by_id, dependents, report)
        else:
            await self._cascade_per_branch(task_id, anchor, by_id, dependents, report)

        if report.failures:
            logger.warning(
                "cascade from %s: %d moved, %d failed",
                task_id,
                len(report.rescheduled),
                len(report.failures),
            )
        return report

    async def _move(
        self,
        task: Task,
        prerequisite_end: datetime,
        depth: int,
        by_id: dict[str, Task],
        report: RescheduleReport,
    ) -> datetime | None:
        """Move one task; returns its new end, or None if it stays put."""
        if depth > self.max_depth:
            report.failures.append(
                _failure(task, CascadeDepthExceededError(task.id, task.title, self.max_depth))
            )
            return None

        new_start, new_end = propose_dates(task, prerequisite_end)
        violation = check_constraints(task, new_start, new_end)
        if violation is not None:
            report.failures.append(_failure(task, violation))
            return None

        if not report.dry_run:
            try:
                by_id[task.id] = await self.repository.update(
                    task.id, TaskUpdate(start_date=new_start, due_date=new_end)
                )
            except TaskflowError as e:
                report.failures.append(_failure(task, e))
                return None
            logger.info(
                "rescheduled %s to %s..%s", task.id, new_start.date(), new_end.date()
            )

        report.rescheduled.append(
            RescheduledTask(
                task_id=task.id,
                title=task.title,
                old_start=task.start_date,
                old_end=task.due_date,
                new_start=new_start,
                new_end=new_end,
                depth=depth,
            )
        )
        return new_end

    async def _cascade_per_branch(
        self,
        root_id: str,
        anchor: datetime,
        by_id: dict[str, Task],
        dependents: dict[str, list[str]],
        report: RescheduleReport,
    ) -> None:
        queue = deque((child, anchor, 1) for child in dependents.get(root_id, []))
        while queue:
            task_id, prerequisite_end, depth = queue.popleft()
            new_end = await self._move(by_id[task_id], prerequisite_end, depth, by_id, report)
            if new_end is None:
                continue
            queue.extend((child, new_end, depth + 1) for child in dependents.get(task_id, []))

    async def _cascade_merged(
        self,
        root_id: str,
        anchor: datetime,
        by_id: dict[str, Task],
        dependents: dict[str, list[str]],
        report: RescheduleReport,
    ) -> None:
        # Everything downstream of the root, in breadth-first discovery order
        affected: list[str] = []
        seen = {root_id}
        queue = deque([root_id])
        while queue:
            for child in dependents.get(queue.popleft(), []):
                if child not in seen:
                    seen.add(child)
                    affected.append(child)
                    queue.append(child)

        prerequisites = {
            task_id: [dep for dep in by_id[task_id].dependencies if dep in seen]
            for task_id in affected
        }
        pending = {task_id: len(prereqs) for task_id, prereqs in prerequisites.items()}
        moved_end: dict[str, datetime] = {root_id: anchor}
        depth: dict[str, int] = {root_id: 0}
        done: set[str] = set()

        ready: deque[str] = deque()

        def release(task_id: str) -> None:
            done.add(task_id)
            for child in dependents.get(task_id, []):
                if child in pending and child not in done:
                    pending[child] -= 1
                    if pending[child] == 0:
                        ready.append(child)

        release(root_id)
        while ready:
            task_id = ready.popleft()
            task = by_id[task_id]
            moved = [dep for dep in prerequisites[task_id] if dep in moved_end]
            if not moved:
                report.skipped.append(task_id)
                release(task_id)
                continue

            latest = max(moved, key=lambda dep: moved_end[dep].date())
            level = max(depth[dep] for dep in moved) + 1
            new_end = await self._move(task, moved_end[latest], level, by_id, report)
            if new_end is not None:
                moved_end[task_id] = new_end
                depth[task_id] = level
            release(task_id)

        # Anything left waiting sits on a stored cycle
        for task_id in affected:
            if task_id not in done:
                task = by_id[task_id]
                report.failures.append(
                    CascadeFailure(
                        task_id=task_id,
                        title=task.title,
                        kind="circular_dependency",
                        message=f"Cannot reschedule {task.label}: it is part of a dependency cycle",
                    )
                )

"""Tests for TaskService."""

from __future__ import annotations

from datetime import datetime

import pytest

from taskflow.models import DependencyInUseError, TaskFilters, TaskNotFoundError
from taskflow.services.task_service import TaskService


@pytest.fixture()
def service(repo, clock):
    return TaskService(repo, clock=clock)


@pytest.mark.asyncio
async def test_add_task_parses_dates_and_constraints(service):
    task = await service.add_task(
        "Write docs",
        start_date="2024-06-10",
        due_date="2024-06-12",
        max_end_date="2024-06-30",
        priority="high",
    )

    assert task.id == "task_1"
    assert task.start_date == datetime(2024, 6, 10)
    assert task.constraints.max_end_date == datetime(2024, 6, 30)
    assert task.constraints.max_start_date is None
    assert task.dependencies == []


@pytest.mark.asyncio
async def test_add_task_rejects_bad_date(service):
    with pytest.raises(ValueError, match="Invalid date"):
        await service.add_task("Broken", due_date="next tuesday-ish")


@pytest.mark.asyncio
async def test_get_task_missing(service):
    with pytest.raises(TaskNotFoundError):
        await service.get_task("nope")


@pytest.mark.asyncio
async def test_resolve_task_id_by_suffix(service):
    await service.add_task("One")
    await service.add_task("Two")

    assert await service.resolve_task_id("task_2") == "task_2"
    assert await service.resolve_task_id("_2") == "task_2"
    with pytest.raises(TaskNotFoundError):
        await service.resolve_task_id("9")


@pytest.mark.asyncio
async def test_resolve_task_id_ambiguous(make_task, make_repo):
    service = TaskService(make_repo(make_task("abc1"), make_task("xbc1")))
    with pytest.raises(ValueError, match="Ambiguous"):
        await service.resolve_task_id("bc1")


@pytest.mark.asyncio
async def test_list_tasks_applies_filters(service):
    await service.add_task("Alpha", priority="high", due_date="2024-06-12")
    await service.add_task("Beta", priority="low", due_date="2024-06-09")

    assert [t.title for t in await service.list_tasks()] == ["Beta", "Alpha"]
    high = await service.list_tasks(TaskFilters(priority="high"))
    assert [t.title for t in high] == ["Alpha"]
    overdue = await service.list_tasks(TaskFilters(date_range="overdue"))
    assert [t.title for t in overdue] == ["Beta"]


@pytest.mark.asyncio
async def test_update_and_complete(service, clock):
    task = await service.add_task("Alpha")

    updated = await service.update_task(task.id, due_date="2024-06-20", title="Alpha 2")
    assert updated.due_date == datetime(2024, 6, 20)
    assert updated.title == "Alpha 2"

    done = await service.complete_task(task.id)
    assert done.status == "done"
    assert done.completed_at == clock.now()


@pytest.mark.asyncio
async def test_delete_blocked_by_dependents(make_task, make_repo):
    repo = make_repo(make_task("a"), make_task("b", deps=["a"]))
    service = TaskService(repo)

    with pytest.raises(DependencyInUseError) as exc_info:
        await service.delete_task("a")
    assert exc_info.value.dependent_ids == ["b"]

    assert await service.delete_task("b") is True
    assert await service.delete_task("a") is True
    assert await repo.get_all() == []

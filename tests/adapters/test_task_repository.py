"""Contract tests run against both task repository adapters.

SQLite runs on a private ``:memory:`` database, so the real SQL is exercised
without touching a file.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from taskflow.adapters.memory import InMemoryTaskRepository
from taskflow.adapters.sqlite.task_repository import SqliteTaskRepository
from taskflow.models import (
    DependencyInUseError,
    InvalidDateRangeError,
    TaskCreate,
    TaskNotFoundError,
    TaskUpdate,
)
from taskflow.utils.clock import sequential_ids

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(params=["memory", "sqlite"])
def store(request, clock):
    if request.param == "memory":
        yield InMemoryTaskRepository(clock=clock, id_factory=sequential_ids())
        return
    repo = SqliteTaskRepository(":memory:", clock=clock, id_factory=sequential_ids())
    yield repo
    repo.close()


async def _seed(store, *titles: str):
    return [await store.create(TaskCreate(title=title)) for title in titles]


# ---------------------------------------------------------------------------
# create / read
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_assigns_id_and_timestamps(store, clock):
    task = await store.create(
        TaskCreate(title="Plan", start_date=datetime(2024, 6, 10), due_date=datetime(2024, 6, 12))
    )

    assert task.id == "task_1"
    assert task.created_at == clock.now()
    assert task.completed_at is None
    assert task.dependencies == []
    assert await store.get_by_id("task_1") == task


@pytest.mark.asyncio
async def test_create_done_task_stamps_completed_at(store, clock):
    task = await store.create(TaskCreate(title="Old", status="done"))
    assert task.completed_at == clock.now()


@pytest.mark.asyncio
async def test_create_rejects_inverted_range(store):
    with pytest.raises(InvalidDateRangeError):
        await store.create(
            TaskCreate(title="Bad", start_date=datetime(2024, 6, 12), due_date=datetime(2024, 6, 10))
        )
    assert await store.get_all() == []


@pytest.mark.asyncio
async def test_same_day_range_is_valid(store):
    task = await store.create(
        TaskCreate(
            title="Same day",
            start_date=datetime(2024, 6, 10, 17, 0),
            due_date=datetime(2024, 6, 10, 9, 0),
        )
    )
    assert task.start_date.date() == task.due_date.date()


@pytest.mark.asyncio
async def test_get_all_keeps_insertion_order(store):
    await _seed(store, "c", "a", "b")
    assert [t.title for t in await store.get_all()] == ["c", "a", "b"]


@pytest.mark.asyncio
async def test_missing_task_is_none(store):
    assert await store.get_by_id("nope") is None


@pytest.mark.asyncio
async def test_returned_tasks_are_copies(store):
    (task,) = await _seed(store, "Original")
    task.title = "Changed"
    task.dependencies.append("x")

    stored = await store.get_by_id(task.id)
    assert stored.title == "Original"
    assert stored.dependencies == []


@pytest.mark.asyncio
async def test_get_by_project(store):
    await store.create(TaskCreate(title="In", project_id="p1"))
    await store.create(TaskCreate(title="Out", project_id="p2"))

    assert [t.title for t in await store.get_by_project("p1")] == ["In"]


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_update_applies_only_set_fields(store):
    task = await store.create(
        TaskCreate(title="Plan", description="keep", due_date=datetime(2024, 6, 12))
    )

    updated = await store.update(task.id, TaskUpdate(priority="high"))

    assert updated.priority == "high"
    assert updated.description == "keep"
    assert updated.due_date == datetime(2024, 6, 12)


@pytest.mark.asyncio
async def test_update_with_explicit_none_clears_date(store):
    task = await store.create(TaskCreate(title="Plan", due_date=datetime(2024, 6, 12)))

    updated = await store.update(task.id, TaskUpdate(due_date=None))

    assert updated.due_date is None
    assert (await store.get_by_id(task.id)).due_date is None


@pytest.mark.asyncio
async def test_status_transitions_stamp_and_clear_completed_at(store, clock):
    (task,) = await _seed(store, "Plan")

    clock.set(clock.now() + timedelta(days=2))
    done = await store.update(task.id, TaskUpdate(status="done"))
    assert done.completed_at == clock.now()

    # Staying done keeps the original stamp
    clock.set(clock.now() + timedelta(days=1))
    again = await store.update(task.id, TaskUpdate(status="done"))
    assert again.completed_at == done.completed_at

    reopened = await store.update(task.id, TaskUpdate(status="todo"))
    assert reopened.completed_at is None


@pytest.mark.asyncio
async def test_update_validates_merged_range(store):
    task = await store.create(
        TaskCreate(title="Plan", start_date=datetime(2024, 6, 10), due_date=datetime(2024, 6, 12))
    )

    with pytest.raises(InvalidDateRangeError):
        await store.update(task.id, TaskUpdate(start_date=datetime(2024, 6, 13)))

    stored = await store.get_by_id(task.id)
    assert stored.start_date == datetime(2024, 6, 10)


@pytest.mark.asyncio
async def test_update_missing_task(store):
    with pytest.raises(TaskNotFoundError):
        await store.update("nope", TaskUpdate(title="x"))


@pytest.mark.asyncio
async def test_dependency_order_is_preserved(store):
    a, b, c, d = await _seed(store, "a", "b", "c", "d")

    await store.update(d.id, TaskUpdate(dependencies=[c.id, a.id, b.id, a.id]))

    assert (await store.get_by_id(d.id)).dependencies == [c.id, a.id, b.id]
    all_tasks = {t.id: t for t in await store.get_all()}
    assert all_tasks[d.id].dependencies == [c.id, a.id, b.id]


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_delete_blocked_while_dependents_exist(store):
    a, b, c = await _seed(store, "a", "b", "c")
    await store.update(c.id, TaskUpdate(dependencies=[a.id]))
    await store.update(b.id, TaskUpdate(dependencies=[a.id]))

    with pytest.raises(DependencyInUseError) as exc_info:
        await store.delete(a.id)

    assert exc_info.value.dependent_ids == [b.id, c.id]
    assert await store.get_by_id(a.id) is not None


@pytest.mark.asyncio
async def test_delete_after_detaching(store):
    a, b = await _seed(store, "a", "b")
    await store.update(b.id, TaskUpdate(dependencies=[a.id]))
    await store.update(b.id, TaskUpdate(dependencies=[]))

    assert await store.delete(a.id) is True
    assert [t.id for t in await store.get_all()] == [b.id]


@pytest.mark.asyncio
async def test_delete_missing_task(store):
    with pytest.raises(TaskNotFoundError):
        await store.delete("nope")

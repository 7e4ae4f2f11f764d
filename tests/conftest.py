"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem state and to
build task graphs with deterministic ids and timestamps.
"""

from __future__ import annotations

import asyncio
import logging
import logging.handlers
from datetime import datetime
from unittest.mock import patch

import pytest

from taskflow.adapters.memory import InMemoryTaskRepository
from taskflow.models import Task, TaskConstraints, TaskCreate, TaskUpdate
from taskflow.utils.clock import FixedClock, sequential_ids

NOW = datetime(2024, 6, 10, 9, 0)


# ---------------------------------------------------------------------------
# Task builders
# ---------------------------------------------------------------------------


def _dt(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def build_task(
    task_id: str,
    title: str | None = None,
    *,
    start: str | datetime | None = None,
    due: str | datetime | None = None,
    deps: list[str] | tuple[str, ...] = (),
    max_start: str | None = None,
    max_end: str | None = None,
    **fields,
) -> Task:
    """Task with ISO-string dates, for terse graph setup."""
    constraints = None
    if max_start or max_end:
        constraints = TaskConstraints(
            max_start_date=_dt(max_start), max_end_date=_dt(max_end)
        )
    return Task(
        id=task_id,
        title=title or task_id.upper(),
        start_date=_dt(start),
        due_date=_dt(due),
        dependencies=list(deps),
        constraints=constraints,
        created_at=fields.pop("created_at", NOW),
        **fields,
    )


@pytest.fixture()
def make_task():
    """Factory fixture wrapping :func:`build_task`."""
    return build_task


@pytest.fixture()
def clock():
    return FixedClock(NOW)


@pytest.fixture()
def repo(clock):
    """Empty in-memory repository with ids task_1, task_2, ..."""
    return InMemoryTaskRepository(clock=clock, id_factory=sequential_ids())


@pytest.fixture()
def make_repo(clock):
    """Build an in-memory repository pre-loaded with tasks."""

    def factory(*tasks: Task) -> InMemoryTaskRepository:
        return InMemoryTaskRepository(
            list(tasks), clock=clock, id_factory=sequential_ids("new")
        )

    return factory


# ---------------------------------------------------------------------------
# Config and logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path):
    """Keep the rotating log file out of the real user log directory."""
    import taskflow.utils.logger as logger_mod

    def drop_file_handlers() -> None:
        app_logger = logging.getLogger("taskflow")
        for handler in list(app_logger.handlers):
            if isinstance(handler, logging.handlers.RotatingFileHandler):
                app_logger.removeHandler(handler)
                handler.close()

    original = logger_mod._logger
    logger_mod._logger = None
    drop_file_handlers()
    with patch("taskflow.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    drop_file_handlers()
    logger_mod._logger = original


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_caches so each test gets fresh service instances.
    """
    from taskflow.services.config_service import (
        ConfigService,
        get_config_service,
        get_storage_strategy_context,
    )

    tmpdir = str(tmp_path / "config")
    get_config_service.cache_clear()
    get_storage_strategy_context.cache_clear()
    with patch("taskflow.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("taskflow.services.config_service.user_data_dir", return_value=tmpdir):
            yield ConfigService()
    get_config_service.cache_clear()
    get_storage_strategy_context.cache_clear()


@pytest.fixture()
def memory_backend(tmp_config):
    """Configure the in-memory backend and return its shared repository.

    Commands resolve the same cached strategy, so tasks created through the
    returned repository are visible to CLI invocations in the same test.
    """
    from taskflow.services.config_service import (
        get_config_service,
        get_storage_strategy_context,
    )

    get_config_service().set("storage.backend", "memory")
    get_storage_strategy_context.cache_clear()
    return get_storage_strategy_context().task_repository


@pytest.fixture()
def seed(memory_backend):
    """Create a task in the memory backend outside any event loop.

    CLI commands run their own ``asyncio.run``, so CLI tests stay synchronous
    and seed the store through this helper.
    """

    def factory(title: str, *, deps: list[str] | tuple[str, ...] = (), **fields) -> Task:
        async def create() -> Task:
            task = await memory_backend.create(TaskCreate(title=title, **fields))
            if deps:
                task = await memory_backend.update(
                    task.id, TaskUpdate(dependencies=list(deps))
                )
            return task

        return asyncio.run(create())

    return factory


@pytest.fixture()
def fetch(memory_backend):
    """Read a task back from the memory backend."""

    def factory(task_id: str) -> Task | None:
        return asyncio.run(memory_backend.get_by_id(task_id))

    return factory

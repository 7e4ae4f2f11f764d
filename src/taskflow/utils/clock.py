"""Injectable clock and id generation.

Repositories and services take a clock and an id factory instead of reading
the wall clock or generating random ids themselves, so tests can pin both.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Protocol

IdFactory = Callable[[], str]


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock frozen at a given instant; ``set`` moves it."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return self._instant.date()

    def set(self, instant: datetime) -> None:
        self._instant = instant


def generate_task_id() -> str:
    """Generate a new task id.

    Returns:
        Id string such as ``task_1f0c3e9a5b7d4c2e8a6f0b1c2d3e4f5a``
    """
    return f"task_{uuid.uuid4().hex}"


def sequential_ids(prefix: str = "task") -> IdFactory:
    """Return a factory yielding ``<prefix>_1``, ``<prefix>_2``, ..."""
    counter = 0

    def factory() -> str:
        nonlocal counter
        counter += 1
        return f"{prefix}_{counter}"

    return factory

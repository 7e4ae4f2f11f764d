"""
Strategy Pattern: Storage Strategy Container

The StorageStrategyContext holds the strategy chosen at startup and injects
the task repository into services, so no command branches on the backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from taskflow.repositories import TaskRepository


class StorageStrategy(ABC):
    """
    Abstract base class for storage strategies.

    A strategy owns the repository implementation for one storage backend
    (SQLite file or in-process memory).
    """

    @abstractmethod
    def get_task_repository(self) -> TaskRepository:
        """Get task repository implementation for this strategy."""

    @property
    @abstractmethod
    def storage_type(self) -> str:
        """Get storage type identifier (for logging/debugging)."""


class SqliteStorageStrategy(StorageStrategy):
    """
    Local SQLite storage strategy.

    Instantiated once at startup when ``storage.backend`` is ``sqlite``.
    """

    def __init__(self, db_path: str | None = None):
        """
        Initialize SQLite strategy.

        Args:
            db_path: Path to SQLite database file (None for the default path)
        """
        self.db_path = db_path

        # Import here to avoid circular dependencies
        from taskflow.adapters.sqlite.task_repository import SqliteTaskRepository

        self._task_repo = SqliteTaskRepository(db_path=db_path)

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    @property
    def storage_type(self) -> str:
        return "sqlite"


class MemoryStorageStrategy(StorageStrategy):
    """
    In-memory storage strategy.

    Data lives for the lifetime of the process; ``latency_ms`` adds an
    artificial delay to every repository call.
    """

    def __init__(self, latency_ms: int = 0):
        from taskflow.adapters.memory import InMemoryTaskRepository

        self._task_repo = InMemoryTaskRepository(latency=latency_ms / 1000)

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    @property
    def storage_type(self) -> str:
        return "memory"


class StorageStrategyContext:
    """
    Strategy context that provides access to the task repository.

    Usage:
        strategy = SqliteStorageStrategy(db_path="/path/to/db")
        context = StorageStrategyContext(strategy)

        task_repo = context.task_repository
        await task_repo.get_all()  # Works regardless of strategy
    """

    def __init__(self, strategy: StorageStrategy):
        self._strategy = strategy

    def switch_strategy(self, new_strategy: StorageStrategy):
        """Switch to a new storage strategy at runtime."""
        self._strategy = new_strategy

    @property
    def task_repository(self) -> TaskRepository:
        """Get task repository from current strategy."""
        return self._strategy.get_task_repository()

    @property
    def storage_type(self) -> str:
        return self._strategy.storage_type

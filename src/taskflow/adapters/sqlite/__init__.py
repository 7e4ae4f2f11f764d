"""SQLite adapter for local task storage."""

from .task_repository import SqliteTaskRepository

__all__ = ["SqliteTaskRepository"]

"""Adapters module - Repository implementations for different storage backends.

This package contains concrete implementations (adapters) for the repository interface:
- memory: In-process storage with optional artificial latency
- sqlite: Local SQLite database storage
"""

from .memory import InMemoryTaskRepository
from .sqlite import SqliteTaskRepository

__all__ = ["InMemoryTaskRepository", "SqliteTaskRepository"]

"""Repository interfaces for taskflow.

Implementations (adapters) are in:
- taskflow.adapters.memory (in-process storage)
- taskflow.adapters.sqlite (local SQLite file)
"""

from .repository import TaskRepository, ensure_valid_date_range, find_dependents

__all__ = ["TaskRepository", "ensure_valid_date_range", "find_dependents"]

"""Utility functions for SQLite adapter."""

from __future__ import annotations

from datetime import datetime
from typing import Any


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary.

    Args:
        row: sqlite3.Row object

    Returns:
        Dictionary with column names as keys
    """
    if row is None:
        return {}
    return dict(row)


def to_iso(value: datetime | None) -> str | None:
    """Serialize a datetime for storage."""
    if value is None:
        return None
    return value.isoformat()


def parse_datetime(value: str | datetime | None) -> datetime | None:
    """Parse datetime from various formats.

    Args:
        value: String, datetime object, or None

    Returns:
        datetime object or None
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    return datetime.fromisoformat(text)

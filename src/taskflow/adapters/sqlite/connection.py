"""Connection setup for the local SQLite task store.

Connections run in WAL mode with foreign keys enforced and return
``sqlite3.Row`` rows; the schema is created on first open.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from taskflow.adapters.sqlite import schema

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def default_db_path() -> Path:
    """Default database location inside the user data directory."""
    return Path(user_data_dir("taskflow")) / "taskflow.db"


def initialize_schema(connection: sqlite3.Connection) -> None:
    """Create tables and indexes if missing and stamp the schema version."""
    for statement in schema.ALL_TABLES:
        connection.execute(statement)
    for statement in schema.ALL_INDEXES:
        connection.execute(statement)
    connection.execute(f"PRAGMA user_version = {schema.SCHEMA_VERSION}")
    connection.commit()


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Open a configured connection to *db_path* (or the default location).

    Args:
        db_path: Database file, ``":memory:"`` for a private in-memory database,
            or None for the default location.

    Returns:
        sqlite3.Connection with the schema applied
    """
    if db_path is None:
        db_path = default_db_path()

    is_memory = str(db_path) == MEMORY_DB
    is_new_database = False
    if not is_memory:
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        is_new_database = not db_path.exists()

    connection = sqlite3.connect(
        str(db_path),
        check_same_thread=False,
        timeout=30.0,  # Wait up to 30s for locks
    )
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    if not is_memory:
        connection.execute("PRAGMA journal_mode = WAL")

    if is_new_database:
        # Owner read/write only
        os.chmod(db_path, 0o600)
        logger.info("created task database at %s", db_path)

    initialize_schema(connection)
    return connection

"""Database schema definitions for the local SQLite task store."""

from __future__ import annotations

# Stored in PRAGMA user_version
SCHEMA_VERSION = 1

# Tasks table - main task entity
CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    position INTEGER NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    status TEXT NOT NULL DEFAULT 'todo',
    priority TEXT NOT NULL DEFAULT 'medium',
    type TEXT NOT NULL DEFAULT 'task',
    is_deadline BOOLEAN DEFAULT 0,
    start_date DATETIME,
    due_date DATETIME,

    -- Scheduling constraints
    max_start_date DATETIME,
    max_end_date DATETIME,

    project_id TEXT,
    assignee_id TEXT,
    assignee_name TEXT,

    -- Comment thread (JSON array stored as TEXT)
    comments TEXT NOT NULL DEFAULT '[]',

    created_at DATETIME NOT NULL,
    completed_at DATETIME
)
"""

# Dependency edges; position keeps each task's dependency list ordered
CREATE_TASK_DEPENDENCIES_TABLE = """
CREATE TABLE IF NOT EXISTS task_dependencies (
    task_id TEXT NOT NULL,
    depends_on_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (task_id, depends_on_id),
    FOREIGN KEY (task_id) REFERENCES tasks(id) ON DELETE CASCADE
)
"""

ALL_TABLES = [
    CREATE_TASKS_TABLE,
    CREATE_TASK_DEPENDENCIES_TABLE,
]

ALL_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_position ON tasks(position)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_project ON tasks(project_id)",
    "CREATE INDEX IF NOT EXISTS idx_task_dependencies_target "
    "ON task_dependencies(depends_on_id)",
]

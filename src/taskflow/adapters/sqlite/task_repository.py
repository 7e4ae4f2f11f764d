"""SQLite implementation of TaskRepository."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from taskflow.adapters.memory import apply_update
from taskflow.adapters.sqlite.connection import get_connection
from taskflow.adapters.sqlite.utils import parse_datetime, row_to_dict, to_iso
from taskflow.models import (
    Assignee,
    Comment,
    DependencyInUseError,
    Task,
    TaskConstraints,
    TaskCreate,
    TaskNotFoundError,
    TaskUpdate,
)
from taskflow.repositories import TaskRepository, ensure_valid_date_range
from taskflow.utils.clock import Clock, IdFactory, SystemClock, generate_task_id

logger = logging.getLogger(__name__)

_TASK_COLUMNS = (
    "title",
    "description",
    "status",
    "priority",
    "type",
    "is_deadline",
    "start_date",
    "due_date",
    "max_start_date",
    "max_end_date",
    "project_id",
    "assignee_id",
    "assignee_name",
    "comments",
    "completed_at",
)


class SqliteTaskRepository(TaskRepository):
    """SQLite implementation of task repository."""

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        connection: sqlite3.Connection | None = None,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
    ):
        """Initialize SQLite task repository.

        Args:
            db_path: Optional database file path. If None, uses default location.
            connection: Pre-opened connection (schema must already exist).
            clock: Clock used for created_at / completed_at.
            id_factory: Callable producing new task ids.
        """
        self.db_path = db_path
        self._connection = connection
        self.clock = clock or SystemClock()
        self.id_factory = id_factory or generate_task_id

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _dependencies_by_task(self, task_ids: list[str] | None = None) -> dict[str, list[str]]:
        query = "SELECT task_id, depends_on_id FROM task_dependencies"
        params: list[Any] = []
        if task_ids is not None:
            query += f" WHERE task_id IN ({', '.join('?' for _ in task_ids)})"
            params.extend(task_ids)
        query += " ORDER BY task_id, position"

        result: dict[str, list[str]] = {}
        for row in self.connection.execute(query, params).fetchall():
            result.setdefault(row["task_id"], []).append(row["depends_on_id"])
        return result

    @staticmethod
    def _row_to_task(row: sqlite3.Row, dependencies: list[str]) -> Task:
        data = row_to_dict(row)

        constraints = None
        if data["max_start_date"] or data["max_end_date"]:
            constraints = TaskConstraints(
                max_start_date=parse_datetime(data["max_start_date"]),
                max_end_date=parse_datetime(data["max_end_date"]),
            )

        assigned_to = None
        if data["assignee_id"]:
            assigned_to = Assignee(
                id=data["assignee_id"], name=data["assignee_name"] or ""
            )

        return Task(
            id=data["id"],
            title=data["title"],
            description=data["description"],
            status=data["status"],
            priority=data["priority"],
            type=data["type"],
            is_deadline=bool(data["is_deadline"]),
            start_date=parse_datetime(data["start_date"]),
            due_date=parse_datetime(data["due_date"]),
            dependencies=dependencies,
            constraints=constraints,
            project_id=data["project_id"],
            assigned_to=assigned_to,
            comments=[Comment.model_validate(c) for c in json.loads(data["comments"])],
            created_at=parse_datetime(data["created_at"]),
            completed_at=parse_datetime(data["completed_at"]),
        )

    @staticmethod
    def _task_to_columns(task: Task) -> dict[str, Any]:
        constraints = task.constraints or TaskConstraints()
        return {
            "title": task.title,
            "description": task.description,
            "status": task.status,
            "priority": task.priority,
            "type": task.type,
            "is_deadline": task.is_deadline,
            "start_date": to_iso(task.start_date),
            "due_date": to_iso(task.due_date),
            "max_start_date": to_iso(constraints.max_start_date),
            "max_end_date": to_iso(constraints.max_end_date),
            "project_id": task.project_id,
            "assignee_id": task.assigned_to.id if task.assigned_to else None,
            "assignee_name": task.assigned_to.name if task.assigned_to else None,
            "comments": json.dumps(
                [c.model_dump(mode="json") for c in task.comments]
            ),
            "completed_at": to_iso(task.completed_at),
        }

    def _set_dependencies(self, task_id: str, dependencies: list[str]) -> None:
        """Replace the dependency list of a task, keeping its order."""
        self.connection.execute(
            "DELETE FROM task_dependencies WHERE task_id = ?", (task_id,)
        )
        self.connection.executemany(
            "INSERT INTO task_dependencies (task_id, depends_on_id, position) "
            "VALUES (?, ?, ?)",
            [(task_id, dep_id, pos) for pos, dep_id in enumerate(dependencies)],
        )

    # ------------------------------------------------------------------
    # TaskRepository
    # ------------------------------------------------------------------

    async def get_all(self) -> list[Task]:
        """List all tasks in insertion order."""
        rows = self.connection.execute(
            "SELECT * FROM tasks ORDER BY position"
        ).fetchall()
        dependencies = self._dependencies_by_task()
        return [self._row_to_task(row, dependencies.get(row["id"], [])) for row in rows]

    async def get_by_id(self, task_id: str) -> Task | None:
        """Get a specific task by ID, or None."""
        row = self.connection.execute(
            "SELECT * FROM tasks WHERE id = ?", (task_id,)
        ).fetchone()
        if row is None:
            return None
        dependencies = self._dependencies_by_task([task_id])
        return self._row_to_task(row, dependencies.get(task_id, []))

    async def get_by_project(self, project_id: str) -> list[Task]:
        rows = self.connection.execute(
            "SELECT * FROM tasks WHERE project_id = ? ORDER BY position",
            (project_id,),
        ).fetchall()
        ids = [row["id"] for row in rows]
        dependencies = self._dependencies_by_task(ids) if ids else {}
        return [self._row_to_task(row, dependencies.get(row["id"], [])) for row in rows]

    async def create(self, task_data: TaskCreate) -> Task:
        """Create a new task."""
        ensure_valid_date_range(task_data.start_date, task_data.due_date)
        now = self.clock.now()
        task = Task(
            **task_data.model_dump(),
            id=self.id_factory(),
            dependencies=[],
            created_at=now,
            completed_at=now if task_data.status == "done" else None,
        )

        position = self.connection.execute(
            "SELECT COALESCE(MAX(position), -1) + 1 FROM tasks"
        ).fetchone()[0]
        columns = self._task_to_columns(task)
        names = ["id", "position", "created_at", *columns.keys()]
        values = [task.id, position, to_iso(task.created_at), *columns.values()]

        self.connection.execute(
            f"INSERT INTO tasks ({', '.join(names)}) "
            f"VALUES ({', '.join('?' for _ in names)})",
            values,
        )
        self.connection.commit()
        logger.debug("created task %s", task.id)
        return task

    async def update(self, task_id: str, updates: TaskUpdate) -> Task:
        """Update an existing task."""
        current = await self.get_by_id(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)

        updated = apply_update(current, updates, self.clock)
        columns = self._task_to_columns(updated)
        set_parts = [f"{name} = ?" for name in _TASK_COLUMNS]
        params = [columns[name] for name in _TASK_COLUMNS]
        params.append(task_id)

        try:
            self.connection.execute(
                f"UPDATE tasks SET {', '.join(set_parts)} WHERE id = ?", params
            )
            if updates.dependencies is not None:
                self._set_dependencies(task_id, updated.dependencies)
            self.connection.commit()
        except sqlite3.Error:
            self.connection.rollback()
            raise

        return updated

    async def delete(self, task_id: str) -> bool:
        """Delete a task that nothing depends on."""
        current = await self.get_by_id(task_id)
        if current is None:
            raise TaskNotFoundError(task_id)

        rows = self.connection.execute(
            """SELECT d.task_id FROM task_dependencies d
               JOIN tasks t ON t.id = d.task_id
               WHERE d.depends_on_id = ?
               ORDER BY t.position""",
            (task_id,),
        ).fetchall()
        if rows:
            raise DependencyInUseError(
                task_id, [row["task_id"] for row in rows], title=current.title
            )

        self.connection.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        self.connection.commit()
        logger.debug("deleted task %s", task_id)
        return True

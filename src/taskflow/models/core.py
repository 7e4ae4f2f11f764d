"""Task data models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TaskStatus = Literal["todo", "in-progress", "done"]
TaskPriority = Literal["low", "medium", "high"]
TaskType = Literal["task", "milestone"]

PRIORITY_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}


class _CamelModel(BaseModel):
    """Accepts both snake_case names and the camelCase keys of exported records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class TaskConstraints(_CamelModel):
    """Upper bounds a cascade must not push a task past.

    Attributes:
        max_start_date: Latest allowed start date
        max_end_date: Latest allowed due date
    """

    max_start_date: datetime | None = None
    max_end_date: datetime | None = None


class Assignee(_CamelModel):
    """Person a task is assigned to."""

    id: str
    name: str


class Comment(_CamelModel):
    """Task comment."""

    author: str | None = None
    content: str
    created_at: datetime | None = None


class Task(_CamelModel):
    """Task model representing a complete task entity.

    Attributes:
        id: Unique identifier, stable for the task's lifetime
        title: Short display title
        description: Optional detailed description
        status: Workflow state ("todo", "in-progress", "done")
        priority: "low", "medium" or "high"
        type: "task" or "milestone" (a zero-duration marker)
        is_deadline: Display-only deadline flag
        start_date: Optional start timestamp
        due_date: Optional due timestamp
        dependencies: Ids of tasks that must end before this one starts
        constraints: Optional scheduling upper bounds
        project_id: Optional parent project
        assigned_to: Optional assignee
        comments: Comment thread, searched but never scheduled
        created_at: Creation timestamp
        completed_at: Completion timestamp
    """

    id: str
    title: str
    description: str | None = None
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    type: TaskType = "task"
    is_deadline: bool = False
    start_date: datetime | None = None
    due_date: datetime | None = None
    dependencies: list[str] = Field(default_factory=list)
    constraints: TaskConstraints | None = None
    project_id: str | None = None
    assigned_to: Assignee | None = None
    comments: list[Comment] = Field(default_factory=list)
    created_at: datetime
    completed_at: datetime | None = None

    @field_validator("dependencies")
    @classmethod
    def _dedupe_dependencies(cls, value: list[str]) -> list[str]:
        return _unique(value)

    @property
    def is_milestone(self) -> bool:
        return self.type == "milestone"

    @property
    def label(self) -> str:
        """Title and id, as used in messages."""
        return f"'{self.title}' ({self.id})"


class TaskCreate(_CamelModel):
    """Model for creating a new task.

    Dependencies always start empty; edges are added through the
    dependency graph so the acyclicity check cannot be bypassed.
    """

    title: str
    description: str | None = None
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    type: TaskType = "task"
    is_deadline: bool = False
    start_date: datetime | None = None
    due_date: datetime | None = None
    constraints: TaskConstraints | None = None
    project_id: str | None = None
    assigned_to: Assignee | None = None
    comments: list[Comment] = Field(default_factory=list)


class TaskUpdate(_CamelModel):
    """Model for updating an existing task.

    Only explicitly set fields are applied, so passing ``due_date=None``
    clears the date while omitting it leaves the date alone.
    """

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    type: TaskType | None = None
    is_deadline: bool | None = None
    start_date: datetime | None = None
    due_date: datetime | None = None
    dependencies: list[str] | None = None
    constraints: TaskConstraints | None = None
    project_id: str | None = None
    assigned_to: Assignee | None = None
    comments: list[Comment] | None = None

    @field_validator("dependencies")
    @classmethod
    def _dedupe_dependencies(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else _unique(value)

    def changes(self) -> dict:
        """Fields explicitly set on this update, by field name."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class TaskFilters(BaseModel):
    """Criteria for filtering, searching and sorting a task list.

    Attributes:
        search: Fuzzy text query over title, description, comments and assignee
        status: Exact status, or "all"
        priority: Exact priority, or "all"
        assignee: Assignee id, or "all"
        milestone: "milestone" / "task" to keep only that type, or "all"
        deadline: "deadline" / "normal" on the deadline flag, or "all"
        date_range: Due-date window, or "all"
        sort_by: Sort key
        sort_order: "asc" or "desc"
    """

    search: str | None = None
    status: Literal["all", "todo", "in-progress", "done"] = "all"
    priority: Literal["all", "low", "medium", "high"] = "all"
    assignee: str = "all"
    milestone: Literal["all", "milestone", "task"] = "all"
    deadline: Literal["all", "deadline", "normal"] = "all"
    date_range: Literal[
        "all", "overdue", "today", "this-week", "next-week", "no-due-date"
    ] = "all"
    sort_by: Literal[
        "createdAt",
        "title",
        "priority",
        "dueDate",
        "assignee",
        "status",
        "dependencyLevel",
        "relevance",
    ] = "dueDate"
    sort_order: Literal["asc", "desc"] = "asc"

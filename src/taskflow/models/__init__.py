"""Taskflow domain models.

Pydantic models for tasks, timeline layouts and cascade reports, plus the
error taxonomy raised by the scheduling core.
"""

from .config_models import AppConfig
from .core import (
    PRIORITY_RANK,
    Assignee,
    Comment,
    Task,
    TaskConstraints,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
)
from .exceptions import (
    CascadeDepthExceededError,
    CascadeError,
    CircularDependencyError,
    ConstraintViolationError,
    DependencyInUseError,
    InvalidDateRangeError,
    InvalidZoomLevelError,
    NotFoundError,
    SelfDependencyError,
    TaskflowError,
    TaskNotFoundError,
)
from .schedule import (
    CascadeFailure,
    DependencyStats,
    RescheduledTask,
    RescheduleReport,
)
from .timeline import TimelineItem, TimelineLayout, TimelineWindow

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskFilters",
    "TaskConstraints",
    "Assignee",
    "Comment",
    "PRIORITY_RANK",
    # Timeline models
    "TimelineWindow",
    "TimelineItem",
    "TimelineLayout",
    # Cascade models
    "RescheduleReport",
    "RescheduledTask",
    "CascadeFailure",
    "DependencyStats",
    # Config
    "AppConfig",
    # Errors
    "TaskflowError",
    "TaskNotFoundError",
    "NotFoundError",
    "SelfDependencyError",
    "CircularDependencyError",
    "ConstraintViolationError",
    "InvalidDateRangeError",
    "DependencyInUseError",
    "CascadeDepthExceededError",
    "CascadeError",
    "InvalidZoomLevelError",
]

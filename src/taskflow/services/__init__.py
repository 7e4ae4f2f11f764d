"""Services module for taskflow - Business logic layer."""

from .analytics_service import AnalyticsService, dependency_analysis
from .dependency_graph import DependencyGraph
from .reschedule import RescheduleCascader
from .scheduling_service import SchedulingService
from .task_service import TaskService
from .timeline import TimelineLayoutEngine

__all__ = [
    "TaskService",
    "DependencyGraph",
    "TimelineLayoutEngine",
    "RescheduleCascader",
    "SchedulingService",
    "AnalyticsService",
    "dependency_analysis",
]

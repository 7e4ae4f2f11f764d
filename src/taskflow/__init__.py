"""Taskflow scheduler - dependency graph and timeline scheduling engine."""

__version__ = "0.4.0"

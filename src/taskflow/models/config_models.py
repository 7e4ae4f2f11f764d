"""Configuration models.

Persisted as ``config.json`` by :class:`taskflow.services.config_service.ConfigService`.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class StorageConfig(BaseModel):
    """Storage backend configuration."""

    backend: Literal["sqlite", "memory"] = Field(default="sqlite")
    db_path: str | None = Field(
        default=None, description="SQLite file (defaults to the user data dir)"
    )
    latency_ms: int = Field(default=0, ge=0, description="Memory backend delay")


class TimelineConfig(BaseModel):
    """Timeline configuration."""

    default_zoom: Literal["day", "week", "month"] = Field(default="week")
    week_starts_on: int = Field(default=0, ge=0, le=6)  # 0=Monday


class SchedulingConfig(BaseModel):
    """Cascade configuration."""

    max_cascade_depth: int = Field(default=10, ge=1)
    merge_converging_branches: bool = Field(default=True)


class SearchConfig(BaseModel):
    """Fuzzy search configuration."""

    threshold: float = Field(default=0.6, gt=0, le=1)


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"invalid log level: {v}")
        return level


class AppConfig(BaseModel):
    """Main taskflow configuration"""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    timeline: TimelineConfig = Field(default_factory=TimelineConfig)
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    log: LogConfig = Field(default_factory=LogConfig)

"""Configuration service for managing taskflow configuration.

This module provides the ConfigService class, which is the single source of truth
for configuration management. It handles:

- Loading and saving config.json
- Dotted-key lookup and assignment (``timeline.default_zoom``)
- Config file initialization with sensible defaults
- Building the storage strategy for the configured backend
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError

from taskflow.models.config_models import AppConfig
from taskflow.models.storage_strategy import (
    MemoryStorageStrategy,
    SqliteStorageStrategy,
    StorageStrategyContext,
)


class ConfigService:
    """Service for managing application configuration.

    Loads ``config.json`` from the platform config directory on first access
    and writes it back after every change.
    """

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("taskflow"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("taskflow"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            self._config = AppConfig()
            self.save_config()
        except (OSError, ValidationError) as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self):
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))

            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults."""
        if self.config_path.exists():
            self.config_path.unlink()
        self._config = AppConfig()
        self.save_config()
        return self._config

    def get(self, key: str) -> Any:
        """Look up a dotted key such as ``scheduling.max_cascade_depth``.

        Raises:
            KeyError: If the key does not exist
        """
        value: Any = self.config.model_dump()
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                raise KeyError(f"Unknown config key: {key}")
            value = value[part]
        return value

    def set(self, key: str, value: str) -> Any:
        """Assign a dotted key and persist.

        *value* is parsed as JSON when possible (``true``, ``12``, ``0.5``),
        otherwise kept as a plain string; pydantic validates the result.

        Raises:
            KeyError: If the key does not exist
            ValueError: If the value fails validation
        """
        self.get(key)
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = value

        data = self.config.model_dump()
        *parents, leaf = key.split(".")
        target = data
        for part in parents:
            target = target[part]
        if isinstance(target.get(leaf), dict):
            raise KeyError(f"Config key is a section, not a value: {key}")
        target[leaf] = parsed

        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid value for {key}: {value}") from e
        self.save_config()
        return self.get(key)

    def default_db_path(self) -> Path:
        return self.data_dir / "taskflow.db"

    def build_storage_context(self) -> StorageStrategyContext:
        """Create a StorageStrategyContext for the configured backend."""
        storage = self.config.storage
        if storage.backend == "memory":
            strategy = MemoryStorageStrategy(latency_ms=storage.latency_ms)
        else:
            strategy = SqliteStorageStrategy(
                db_path=storage.db_path or str(self.default_db_path())
            )
        return StorageStrategyContext(strategy)


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service


@lru_cache(maxsize=1)
def get_storage_strategy_context() -> StorageStrategyContext:
    """Get a cached StorageStrategyContext based on the current configuration."""
    return get_config_service().build_storage_context()

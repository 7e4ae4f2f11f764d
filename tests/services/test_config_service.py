"""Unit tests for services/config_service.py.

Uses a real ConfigService pointed at a tmp_path directory.
"""

from __future__ import annotations

import json
import stat

import pytest

from taskflow.adapters.memory import InMemoryTaskRepository
from taskflow.adapters.sqlite.task_repository import SqliteTaskRepository
from taskflow.models import AppConfig
from taskflow.services.config_service import (
    get_config_service,
    get_storage_strategy_context,
)

# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def test_first_access_writes_defaults(tmp_config):
    assert tmp_config.config == AppConfig()
    assert tmp_config.config_path.exists()

    mode = stat.S_IMODE(tmp_config.config_path.stat().st_mode)
    assert mode == 0o600


def test_load_existing_file(tmp_config):
    tmp_config.config_path.write_text(
        json.dumps({"timeline": {"default_zoom": "month"}}), encoding="utf-8"
    )
    assert tmp_config.config.timeline.default_zoom == "month"
    assert tmp_config.config.scheduling.max_cascade_depth == 10


def test_corrupt_file_raises_runtime_error(tmp_config):
    tmp_config.config_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(RuntimeError, match="Failed to load config"):
        tmp_config.load_config()


def test_reset_restores_defaults(tmp_config):
    tmp_config.set("search.threshold", "0.8")
    config = tmp_config.reset_config()

    assert config.search.threshold == 0.6
    saved = json.loads(tmp_config.config_path.read_text(encoding="utf-8"))
    assert saved["search"]["threshold"] == 0.6


# ---------------------------------------------------------------------------
# Dotted get / set
# ---------------------------------------------------------------------------


def test_get_dotted_key(tmp_config):
    assert tmp_config.get("timeline.week_starts_on") == 0
    assert tmp_config.get("scheduling") == {
        "max_cascade_depth": 10,
        "merge_converging_branches": True,
    }


def test_get_unknown_key(tmp_config):
    with pytest.raises(KeyError):
        tmp_config.get("timeline.colour")


@pytest.mark.parametrize(
    ("key", "raw", "expected"),
    [
        ("scheduling.max_cascade_depth", "4", 4),
        ("scheduling.merge_converging_branches", "false", False),
        ("search.threshold", "0.75", 0.75),
        ("timeline.default_zoom", "month", "month"),
        ("log.level", "debug", "DEBUG"),
    ],
)
def test_set_parses_and_persists(tmp_config, key, raw, expected):
    assert tmp_config.set(key, raw) == expected

    tmp_config._config = None
    assert tmp_config.get(key) == expected


@pytest.mark.parametrize(
    ("key", "raw"),
    [
        ("scheduling.max_cascade_depth", "0"),
        ("timeline.default_zoom", "year"),
        ("timeline.week_starts_on", "7"),
        ("log.level", "chatty"),
    ],
)
def test_set_rejects_invalid_values(tmp_config, key, raw):
    before = tmp_config.get(key)
    with pytest.raises(ValueError):
        tmp_config.set(key, raw)
    assert tmp_config.get(key) == before


def test_set_rejects_sections_and_unknown_keys(tmp_config):
    with pytest.raises(KeyError):
        tmp_config.set("scheduling", "1")
    with pytest.raises(KeyError):
        tmp_config.set("scheduling.speed", "1")


# ---------------------------------------------------------------------------
# Storage wiring
# ---------------------------------------------------------------------------


def test_default_backend_is_sqlite_in_data_dir(tmp_config):
    context = tmp_config.build_storage_context()

    assert context.storage_type == "sqlite"
    repo = context.task_repository
    assert isinstance(repo, SqliteTaskRepository)
    assert str(repo.db_path) == str(tmp_config.default_db_path())


def test_memory_backend_with_latency(tmp_config):
    tmp_config.set("storage.backend", "memory")
    tmp_config.set("storage.latency_ms", "25")

    repo = tmp_config.build_storage_context().task_repository

    assert isinstance(repo, InMemoryTaskRepository)
    assert repo.latency == pytest.approx(0.025)


def test_cached_helpers_share_instances(tmp_config):
    assert get_config_service() is get_config_service()
    assert get_storage_strategy_context() is get_storage_strategy_context()

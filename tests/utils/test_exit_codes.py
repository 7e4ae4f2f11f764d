"""Tests for exit code helpers."""

from __future__ import annotations

import pytest

from taskflow.utils.exit_codes import (
    ERROR_CONFLICT,
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_NOT_FOUND,
    ERROR_PARTIAL_FAILURE,
    SUCCESS,
    exit_code_for_kind,
    get_exit_code_description,
    get_exit_code_name,
)


def test_codes_are_distinct():
    codes = [
        SUCCESS,
        ERROR_GENERAL,
        ERROR_INVALID_ARGS,
        ERROR_NOT_FOUND,
        ERROR_CONFLICT,
        ERROR_PARTIAL_FAILURE,
    ]
    assert len(set(codes)) == len(codes)


def test_names_and_descriptions():
    assert get_exit_code_name(ERROR_CONFLICT) == "ERROR_CONFLICT"
    assert get_exit_code_name(99) == "UNKNOWN(99)"
    assert get_exit_code_description(ERROR_NOT_FOUND) == "Task not found"
    assert get_exit_code_description(99) == "Unknown error"


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("task_not_found", ERROR_NOT_FOUND),
        ("self_dependency", ERROR_CONFLICT),
        ("circular_dependency", ERROR_CONFLICT),
        ("dependency_in_use", ERROR_CONFLICT),
        ("invalid_date_range", ERROR_INVALID_ARGS),
        ("invalid_zoom_level", ERROR_INVALID_ARGS),
        ("cascade_failed", ERROR_PARTIAL_FAILURE),
        ("something_else", ERROR_GENERAL),
    ],
)
def test_exit_code_for_kind(kind, code):
    assert exit_code_for_kind(kind) == code

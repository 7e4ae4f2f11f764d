"""
Exit codes for the taskflow CLI.

Semantic exit codes so scripts driving the CLI can tell a missing task from a
rejected dependency edge or a cascade that only partially applied.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error (bad dates, inverted ranges)
ERROR_INVALID_ARGS = 2

# Resource not found
ERROR_NOT_FOUND = 5

# Graph conflict (self dependency, cycle, task still in use)
ERROR_CONFLICT = 6

# Cascade applied some updates but recorded failures
ERROR_PARTIAL_FAILURE = 7


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_CONFLICT: "ERROR_CONFLICT",
        ERROR_PARTIAL_FAILURE: "ERROR_PARTIAL_FAILURE",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or validation error",
        ERROR_NOT_FOUND: "Task not found",
        ERROR_CONFLICT: "Dependency graph conflict",
        ERROR_PARTIAL_FAILURE: "Cascade partially applied - see failures",
    }
    return descriptions.get(code, "Unknown error")


def exit_code_for_kind(kind: str) -> int:
    """Map a TaskflowError kind to the exit code the CLI returns for it."""
    return {
        "task_not_found": ERROR_NOT_FOUND,
        "self_dependency": ERROR_CONFLICT,
        "circular_dependency": ERROR_CONFLICT,
        "dependency_in_use": ERROR_CONFLICT,
        "invalid_date_range": ERROR_INVALID_ARGS,
        "invalid_zoom_level": ERROR_INVALID_ARGS,
        "constraint_violation": ERROR_PARTIAL_FAILURE,
        "cascade_depth_exceeded": ERROR_PARTIAL_FAILURE,
        "cascade_failed": ERROR_PARTIAL_FAILURE,
    }.get(kind, ERROR_GENERAL)

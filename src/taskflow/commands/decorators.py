"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
import traceback
from collections.abc import Callable

import typer

from taskflow.models import CascadeError, TaskflowError
from taskflow.services.config_service import get_config_service
from taskflow.utils.exit_codes import (
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_PARTIAL_FAILURE,
    exit_code_for_kind,
)
from taskflow.utils.logger import get_logger
from taskflow.utils.ui.formatters import format_cascade_report, format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def command_wrapper(_func: Callable | None = None):
    """Decorator to wrap command functions with common functionality."""

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            try:
                logger.setLevel(get_config_service().config.log.level)
                logger.info("command started: %s", cmd)

                if inspect.iscoroutinefunction(func):
                    result = asyncio.run(func(*args, **kwargs))
                else:
                    result = func(*args, **kwargs)

                elapsed = time.monotonic() - start
                logger.info("command completed: %s (%.3fs)", cmd, elapsed)
                return result

            except CascadeError as e:
                elapsed = time.monotonic() - start
                logger.warning(
                    "command partially failed: %s (%.3fs) - %s", cmd, elapsed, e.message
                )
                format_cascade_report(e.report)
                format_error(f"{len(e.failures)} task(s) could not be rescheduled")
                raise typer.Exit(code=ERROR_PARTIAL_FAILURE) from e

            except TaskflowError as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - [%s] %s", cmd, elapsed, e.kind, e.message
                )
                format_error(e.message)
                raise typer.Exit(code=exit_code_for_kind(e.kind)) from e

            except AppError as e:
                elapsed = time.monotonic() - start
                logger.error("command failed: %s (%.3fs) - %s", cmd, elapsed, str(e))
                format_error(str(e))
                raise typer.Exit(code=e.exit_code) from e

            except (ValueError, KeyError) as e:
                elapsed = time.monotonic() - start
                message = e.args[0] if isinstance(e, KeyError) and e.args else str(e)
                logger.error("command failed: %s (%.3fs) - %s", cmd, elapsed, message)
                format_error(str(message))
                raise typer.Exit(code=ERROR_INVALID_ARGS) from e

            except typer.Exit:
                # Re-raise Typer's own exits (like --help or explicit Exit(0))
                raise

            except Exception as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    elapsed,
                    str(e),
                    traceback.format_exc(),
                )
                format_error(f"An unexpected error occurred: {str(e)}")
                raise typer.Exit(code=ERROR_GENERAL) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)

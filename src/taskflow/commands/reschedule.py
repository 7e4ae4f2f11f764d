"""Command 'reschedule' of taskflow"""

from typing import Annotated

import typer

from taskflow.services.config_service import (
    get_config_service,
    get_storage_strategy_context,
)
from taskflow.services.reschedule import RescheduleCascader
from taskflow.services.task_service import TaskService
from taskflow.utils.dates import parse_date_option
from taskflow.utils.ui.formatters import format_cascade_report, format_info

from .decorators import command_wrapper


@command_wrapper
async def reschedule_command(
    task_id: Annotated[str, typer.Argument(help="Task whose end date changed")],
    end: Annotated[str, typer.Option("--end", "-e", help="New end date")],
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Show the changes without saving them")
    ] = False,
) -> None:
    """Push every dependent of a task after its new end date."""
    scheduling = get_config_service().config.scheduling
    repo = get_storage_strategy_context().task_repository
    resolved_id = await TaskService(repo).resolve_task_id(task_id)

    cascader = RescheduleCascader(
        repo,
        max_depth=scheduling.max_cascade_depth,
        merge_converging=scheduling.merge_converging_branches,
    )
    new_end = parse_date_option(end)
    if dry_run:
        report = await cascader.preview(resolved_id, new_end)
        format_cascade_report(report)
        format_info("Dry run, nothing was saved")
        return

    report = await cascader.reschedule(resolved_id, new_end)
    format_cascade_report(report)

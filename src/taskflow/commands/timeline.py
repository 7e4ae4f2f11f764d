"""Timeline commands."""

from typing import Annotated

import typer

from taskflow.models import InvalidZoomLevelError
from taskflow.services.config_service import (
    get_config_service,
    get_storage_strategy_context,
)
from taskflow.services.reschedule import RescheduleCascader, task_duration
from taskflow.services.scheduling_service import SchedulingService
from taskflow.services.task_service import TaskService
from taskflow.services.timeline import DAY_WIDTHS, TimelineLayoutEngine
from taskflow.utils.dates import add_days, parse_date_option
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.formatters import (
    format_cascade_report,
    format_success,
    render_timeline,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Timeline view of scheduled tasks")


@app.command("show")
@command_wrapper
async def show_timeline(
    zoom: Annotated[
        str | None, typer.Option("--zoom", "-z", help="day, week or month")
    ] = None,
    anchor: Annotated[
        str | None, typer.Option("--anchor", help="Date to show (default today)")
    ] = None,
    page: Annotated[
        int, typer.Option("--page", help="Pages to move from the anchor (negative = back)")
    ] = 0,
    sort: Annotated[str, typer.Option("--sort", help="start, priority or title")] = "start",
) -> None:
    """Render the tasks on a calendar window."""
    config = get_config_service().config
    zoom = zoom or config.timeline.default_zoom
    if zoom not in DAY_WIDTHS:
        raise InvalidZoomLevelError(zoom)

    engine = TimelineLayoutEngine(week_starts_on=config.timeline.week_starts_on)
    current = parse_date_option(anchor, engine.clock).date() if anchor else engine.today()
    direction = "next" if page > 0 else "prev"
    for _ in range(abs(page)):
        current = engine.navigate(current, zoom, direction)

    tasks = await get_storage_strategy_context().task_repository.get_all()
    render_timeline(engine.layout(tasks, zoom, current, sort=sort))


@app.command("move")
@command_wrapper
async def move_task(
    task_id: Annotated[str, typer.Argument(help="Task ID or suffix")],
    start: Annotated[str, typer.Option("--start", help="New start date")],
    cascade: Annotated[
        bool, typer.Option("--cascade/--no-cascade", help="Push dependents along")
    ] = True,
) -> None:
    """Move a task to a new start date, keeping its duration."""
    config = get_config_service().config
    repo = get_storage_strategy_context().task_repository
    resolved_id = await TaskService(repo).resolve_task_id(task_id)
    task = await TaskService(repo).get_task(resolved_id)

    new_start = parse_date_option(start)
    new_end = add_days(new_start, task_duration(task) - 1)
    cascader = RescheduleCascader(
        repo,
        max_depth=config.scheduling.max_cascade_depth,
        merge_converging=config.scheduling.merge_converging_branches,
    )
    updated, report = await SchedulingService(repo, cascader).move_task(
        resolved_id, new_start, new_end, cascade=cascade
    )
    format_success(
        f"Moved {updated.label} to {new_start.date().isoformat()} → {new_end.date().isoformat()}"
    )
    if report is not None:
        format_cascade_report(report)

"""Task management commands."""

from typing import Annotated

import typer

from taskflow.models import TaskFilters
from taskflow.repositories import find_dependents
from taskflow.services.config_service import (
    get_config_service,
    get_storage_strategy_context,
)
from taskflow.services.dependency_graph import DependencyGraph
from taskflow.services.task_service import TaskService
from taskflow.utils.dates import parse_date_option
from taskflow.utils.exit_codes import ERROR_INVALID_ARGS
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.formatters import (
    OUTPUT_FORMATS,
    format_success,
    format_task_detail,
    format_tasks,
    format_warning,
)

from .decorators import AppError, command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Task management commands")


def _task_service() -> TaskService:
    return TaskService(get_storage_strategy_context().task_repository)


def _check_output(output: str) -> None:
    if output not in OUTPUT_FORMATS:
        raise AppError(
            f"Unknown output format '{output}' (expected {', '.join(OUTPUT_FORMATS)})",
            ERROR_INVALID_ARGS,
        )


def _optional_date(value: str | None):
    return parse_date_option(value) if value is not None else None


@app.command("list")
@command_wrapper
async def list_tasks(
    search: Annotated[str | None, typer.Option("--search", "-s", help="Fuzzy search")] = None,
    status: Annotated[str, typer.Option("--status", help="todo, in-progress, done")] = "all",
    priority: Annotated[str, typer.Option("--priority", help="low, medium, high")] = "all",
    assignee: Annotated[str, typer.Option("--assignee", help="Assignee id")] = "all",
    milestone: Annotated[str, typer.Option("--milestone", help="milestone or task")] = "all",
    deadline: Annotated[str, typer.Option("--deadline", help="deadline or normal")] = "all",
    date_range: Annotated[
        str,
        typer.Option(
            "--range", help="overdue, today, this-week, next-week, no-due-date"
        ),
    ] = "all",
    sort_by: Annotated[str, typer.Option("--sort", help="Sort key")] = "dueDate",
    sort_order: Annotated[str, typer.Option("--order", help="asc or desc")] = "asc",
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "table",
) -> None:
    """List tasks, filtered, searched and sorted."""
    _check_output(output)
    filters = TaskFilters(
        search=search,
        status=status,
        priority=priority,
        assignee=assignee,
        milestone=milestone,
        deadline=deadline,
        date_range=date_range,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    config = get_config_service().config
    tasks = await _task_service().list_tasks(
        filters,
        week_starts_on=config.timeline.week_starts_on,
        search_threshold=config.search.threshold,
    )
    format_tasks(tasks, output)


@app.command("add")
@command_wrapper
async def add_task(
    title: Annotated[str, typer.Argument(help="Task title")],
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="Description")
    ] = None,
    start: Annotated[str | None, typer.Option("--start", help="Start date")] = None,
    due: Annotated[str | None, typer.Option("--due", help="Due date")] = None,
    priority: Annotated[str, typer.Option("--priority", "-p", help="low, medium, high")] = "medium",
    task_type: Annotated[str, typer.Option("--type", help="task or milestone")] = "task",
    deadline: Annotated[bool, typer.Option("--deadline", help="Hard deadline")] = False,
    max_start: Annotated[
        str | None, typer.Option("--max-start", help="Latest allowed start")
    ] = None,
    max_end: Annotated[str | None, typer.Option("--max-end", help="Latest allowed end")] = None,
    project: Annotated[str | None, typer.Option("--project", help="Project id")] = None,
) -> None:
    """Create a task."""
    task = await _task_service().add_task(
        title,
        description=description,
        priority=priority,
        task_type=task_type,
        is_deadline=deadline,
        start_date=_optional_date(start),
        due_date=_optional_date(due),
        max_start_date=_optional_date(max_start),
        max_end_date=_optional_date(max_end),
        project_id=project,
    )
    format_success(f"Created task {task.label}")


@app.command("show")
@command_wrapper
async def show_task(
    task_id: Annotated[str, typer.Argument(help="Task ID or suffix")],
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "table",
) -> None:
    """Show task details."""
    _check_output(output)
    service = _task_service()
    task = await service.get_task(await service.resolve_task_id(task_id))
    format_task_detail(task, output)


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: Annotated[str, typer.Argument(help="Task ID or suffix")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Detach dependents first")
    ] = False,
) -> None:
    """Delete a task that nothing depends on.

    With --force the task is first removed from the dependency lists of its
    dependents.
    """
    service = _task_service()
    resolved_id = await service.resolve_task_id(task_id)
    if force:
        graph = DependencyGraph(service.repository)
        for dependent_id in find_dependents(await service.repository.get_all(), resolved_id):
            await graph.remove_dependency(dependent_id, resolved_id)
            format_warning(f"Removed dependency from {dependent_id}")
    await service.delete_task(resolved_id)
    format_success(f"Deleted task {resolved_id}")

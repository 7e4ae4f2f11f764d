"""Task dependency commands."""

from typing import Annotated

import typer
from rich.table import Table

from taskflow.services.analytics_service import AnalyticsService
from taskflow.services.config_service import get_storage_strategy_context
from taskflow.services.dependency_graph import DependencyGraph
from taskflow.services.task_service import TaskService
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.console import get_console
from taskflow.utils.ui.formatters import (
    format_dependency_stats,
    format_info,
    format_output,
    format_success,
    format_warning,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Manage task dependencies")
console = get_console()


@app.command("add")
@command_wrapper
async def add_dependency(
    prerequisite: Annotated[str, typer.Argument(help="Task that must finish first")],
    dependent: Annotated[str, typer.Argument(help="Task that waits for it")],
) -> None:
    """Make DEPENDENT depend on PREREQUISITE."""
    repo = get_storage_strategy_context().task_repository
    service = TaskService(repo)
    prerequisite_id = await service.resolve_task_id(prerequisite)
    dependent_id = await service.resolve_task_id(dependent)

    before = await service.get_task(dependent_id)
    updated = await DependencyGraph(repo).add_dependency(prerequisite_id, dependent_id)
    if len(updated.dependencies) == len(before.dependencies):
        format_info(f"{updated.label} already depends on {prerequisite_id}")
    else:
        format_success(f"{updated.label} now depends on {prerequisite_id}")


@app.command("remove")
@command_wrapper
async def remove_dependency(
    task_id: Annotated[str, typer.Argument(help="Dependent task")],
    prerequisite: Annotated[str, typer.Argument(help="Prerequisite to drop")],
) -> None:
    """Remove PREREQUISITE from the dependencies of TASK_ID."""
    repo = get_storage_strategy_context().task_repository
    service = TaskService(repo)
    resolved_id = await service.resolve_task_id(task_id)
    task = await service.get_task(resolved_id)

    # Ids of deleted prerequisites only exist in the dependency list
    if prerequisite in task.dependencies:
        prerequisite_id = prerequisite
    else:
        prerequisite_id = await service.resolve_task_id(prerequisite)

    if prerequisite_id not in task.dependencies:
        format_warning(f"{task.label} does not depend on {prerequisite_id}")
        return

    updated = await DependencyGraph(repo).remove_dependency(resolved_id, prerequisite_id)
    format_success(f"{updated.label} no longer depends on {prerequisite_id}")


@app.command("list")
@command_wrapper
async def list_dependencies(
    task_id: Annotated[str, typer.Argument(help="Task ID or suffix")],
    transitive: Annotated[
        bool, typer.Option("--all", "-a", help="Include indirect dependents")
    ] = False,
) -> None:
    """Show what a task waits for and what waits for it."""
    repo = get_storage_strategy_context().task_repository
    resolved_id = await TaskService(repo).resolve_task_id(task_id)

    graph = DependencyGraph(repo)
    await graph.refresh()
    dependents = (
        graph.get_transitive_dependents(resolved_id)
        if transitive
        else graph.get_dependents(resolved_id)
    )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Relation")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Status")
    for task in graph.get_dependencies(resolved_id):
        table.add_row("depends on", task.id, task.title, task.status)
    for task in dependents:
        table.add_row("blocks", task.id, task.title, task.status)

    if table.row_count == 0:
        console.print("[yellow]No dependencies[/yellow]")
        return
    console.print(table)


@app.command("stats")
@command_wrapper
async def dependency_stats(
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "table",
) -> None:
    """Dependency counts, blocked tasks and the critical path."""
    repo = get_storage_strategy_context().task_repository
    stats = await AnalyticsService(repo).get_dependency_analysis()
    if output != "table":
        format_output(stats.model_dump(), output)
        return
    titles = {task.id: task.title for task in await repo.get_all()}
    format_dependency_stats(stats, titles)

"""Output formatters for different formats."""

import json
from datetime import date, datetime
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table
from rich.text import Text

from taskflow.models import (
    DependencyStats,
    RescheduleReport,
    Task,
    TimelineItem,
    TimelineLayout,
)

console = Console()

OUTPUT_FORMATS = ("table", "json", "yaml")

PRIORITY_COLORS = {
    "high": "bold red",
    "medium": "yellow",
    "low": "green",
}

STATUS_ICONS = {
    "todo": "⬜",
    "in-progress": "🔄",
    "done": "☑️",
}

# Columns per day in the rendered timeline, by zoom level
TIMELINE_CELLS = {"day": 4, "week": 2, "month": 1}


def calculate_unique_suffixes(task_ids: list[str]) -> dict[str, int]:
    """
    Calculate minimum unique suffix length for each task ID.

    Starts from length 1 and grows until unique among all IDs.

    Args:
        task_ids: List of full task IDs

    Returns:
        Dict mapping task_id -> required suffix length
    """
    result = {}
    for task_id in task_ids:
        for length in range(1, len(task_id) + 1):
            suffix = task_id[-length:]
            conflicts = [
                tid for tid in task_ids if tid != task_id and tid.endswith(suffix)
            ]
            if not conflicts:
                result[task_id] = length
                break
        else:
            result[task_id] = len(task_id)
    return result


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def format_output(data: Any, output_format: str = "table") -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.safe_dump(json.loads(json.dumps(data, default=str)), sort_keys=False))
    elif isinstance(data, list):
        format_dict_table(data)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    if not items:
        console.print("[yellow]No items found[/yellow]")
        return

    columns = list(items[0].keys())
    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    for item in items:
        table.add_row(*(_format_value(item.get(col)) for col in columns))

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                table.add_row(f"{key}.{sub_key}", _format_value(sub_value))
        else:
            table.add_row(key.replace("_", " ").title(), _format_value(value))

    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


# ============================================================================
# Tasks
# ============================================================================


def task_summary(task: Task) -> dict[str, Any]:
    """Flat dict of the fields shown in listings."""
    return {
        "id": task.id,
        "title": task.title,
        "status": task.status,
        "priority": task.priority,
        "start": task.start_date,
        "due": task.due_date,
        "dependencies": task.dependencies,
    }


def format_tasks(tasks: list[Task], output_format: str = "table") -> None:
    """Render a task listing; ids are shortened to their unique suffix."""
    if output_format != "table":
        format_output([task.model_dump(mode="json") for task in tasks], output_format)
        return
    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return

    suffixes = calculate_unique_suffixes([task.id for task in tasks])
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Start")
    table.add_column("Due")
    table.add_column("Deps", justify="right")

    for task in tasks:
        title = f"◆ {task.title}" if task.is_milestone else task.title
        if task.is_deadline:
            title += " ⚑"
        table.add_row(
            task.id[-suffixes[task.id] :],
            title,
            f"{STATUS_ICONS.get(task.status, '')} {task.status}".strip(),
            Text(task.priority, style=PRIORITY_COLORS.get(task.priority, "")),
            _format_value(task.start_date),
            _format_value(task.due_date),
            str(len(task.dependencies)),
        )
    console.print(table)


def format_task_detail(task: Task, output_format: str = "table") -> None:
    """Render one task with its constraints and comments."""
    data = task.model_dump(mode="json")
    if output_format != "table":
        format_output(data, output_format)
        return

    details = task_summary(task)
    details["type"] = task.type
    details["deadline"] = task.is_deadline
    if task.description:
        details["description"] = task.description
    if task.constraints is not None:
        details["max_start"] = task.constraints.max_start_date
        details["max_end"] = task.constraints.max_end_date
    if task.assigned_to is not None:
        details["assignee"] = task.assigned_to.name
    details["comments"] = len(task.comments)
    format_single_item(details)


# ============================================================================
# Timeline
# ============================================================================


def _timeline_bar(item: TimelineItem, window_days: int, cells: int) -> Text:
    start = min(item.start_offset, window_days)
    length = max(0, min(item.duration, window_days - start))
    style = PRIORITY_COLORS.get(item.task.priority, "cyan")
    glyph = "◆" if item.task.is_milestone else "█"
    bar = Text(" " * (start * cells))
    if length:
        bar.append(glyph * (length * cells), style=style)
    return bar


def _timeline_header(layout: TimelineLayout, cells: int) -> str:
    """Day-of-month ruler, labelled at every week start."""
    ruler = ["·"] * (layout.window.days * cells)
    for offset in range(0, layout.window.days, 7):
        day = date.fromordinal(layout.window.start.toordinal() + offset)
        position = offset * cells
        for i, char in enumerate(day.strftime("%d")):
            if position + i < len(ruler):
                ruler[position + i] = char
    return "".join(ruler)


def render_timeline(layout: TimelineLayout) -> None:
    """Render a timeline layout as a table with one bar per task."""
    window = layout.window
    cells = TIMELINE_CELLS[window.zoom]
    last_day = date.fromordinal(window.end.toordinal() - 1)

    table = Table(
        title=f"{window.start.isoformat()} to {last_day.isoformat()} ({window.zoom})",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Task", no_wrap=True)
    table.add_column("Dates", no_wrap=True)
    table.add_column(_timeline_header(layout, cells), no_wrap=True)

    for item in layout.items:
        dates = item.task_start.isoformat()
        if item.task_end != item.task_start:
            dates += f" → {item.task_end.isoformat()}"
        table.add_row(item.task.title, dates, _timeline_bar(item, window.days, cells))

    if not layout.items:
        console.print("[yellow]No scheduled tasks[/yellow]")
        return
    console.print(table)


# ============================================================================
# Cascades and analytics
# ============================================================================


def format_cascade_report(report: RescheduleReport) -> None:
    """Render the moves, failures and skipped tasks of a cascade."""
    verb = "Would reschedule" if report.dry_run else "Rescheduled"
    if not report.rescheduled:
        console.print("[yellow]No dependent tasks to reschedule[/yellow]")
    else:
        table = Table(
            title=f"{verb} {len(report.rescheduled)} task(s)",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Task")
        table.add_column("Old range")
        table.add_column("New range")
        table.add_column("Depth", justify="right")
        for entry in report.rescheduled:
            table.add_row(
                entry.title,
                f"{_format_value(entry.old_start)} → {_format_value(entry.old_end)}",
                f"{_format_value(entry.new_start)} → {_format_value(entry.new_end)}",
                str(entry.depth),
            )
        console.print(table)

    for failure in report.failures:
        format_warning(failure.message)
    if report.skipped:
        format_info(f"Skipped {len(report.skipped)} task(s): {', '.join(report.skipped)}")


def format_dependency_stats(stats: DependencyStats, titles: dict[str, str]) -> None:
    """Render dependency analytics; *titles* maps ids to titles for the path."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Tasks with dependencies", str(stats.tasks_with_dependencies))
    table.add_row("Average dependencies", f"{stats.average_dependencies:.2f}")
    table.add_row("Blocked tasks", str(stats.blocked_tasks))
    path = " → ".join(titles.get(task_id, task_id) for task_id in stats.critical_path)
    table.add_row("Critical path", path or "-")
    table.add_row("Critical path days", str(stats.critical_path_days))
    console.print(table)

"""Main entry point for the taskflow CLI."""

import typer

from taskflow import __version__
from taskflow.commands import config, deps, tasks, timeline
from taskflow.commands.reschedule import reschedule_command
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.console import get_console

app = typer.Typer(
    name="taskflow",
    cls=SuggestingGroup,
    help="Task dependencies and timeline scheduling from the command line",
    no_args_is_help=True,
)

console = get_console()

app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(deps.app, name="deps", help="Manage task dependencies")
app.add_typer(timeline.app, name="timeline", help="Timeline view of scheduled tasks")
app.add_typer(config.app, name="config", help="Configuration management")
app.command("reschedule")(reschedule_command)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]taskflow[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()

"""
FILE: laneboard/cli/app.py
PURPOSE: Typer application, sub-command groups and shared console objects
EXPORTS:
  - app (Typer application)
  - project_app, sprint_app, story_app, task_app, lane_app (sub-command groups)
  - console, error_console (Rich consoles)
  - resolve_project(ref) -> Project
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output)
  - laneboard.core.service (business logic)
  - laneboard.config / laneboard.log (settings and logging)
  - laneboard.repl (interactive mode)
NOTES:
  - Listing commands support --json and --raw flags
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
  - --project may be omitted when exactly one project exists
"""

from typing import Optional

import typer
from rich.console import Console

from ..config import get_settings
from ..core import service
from ..core.exceptions import InvalidInputError
from ..core.models import Project
from ..log import setup_logging

# Typer app setup
app = typer.Typer(
    name="laneboard",
    help="Scrum/Kanban board with user-defined workflow lanes",
    add_completion=False,
)

project_app = typer.Typer(name="project", help="Project management commands")
sprint_app = typer.Typer(name="sprint", help="Sprint management commands")
story_app = typer.Typer(name="story", help="Story commands")
task_app = typer.Typer(name="task", help="Task commands")
lane_app = typer.Typer(name="lane", help="Workflow lane commands")

app.add_typer(project_app, name="project")
app.add_typer(sprint_app, name="sprint")
app.add_typer(story_app, name="story")
app.add_typer(task_app, name="task")
app.add_typer(lane_app, name="lane")

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)


def resolve_project(ref: Optional[str]) -> Project:
    """
    Project named by --project, or the only project when there is one.

    Raises:
        InvalidInputError: If no project matches or the choice is ambiguous
    """
    if ref:
        return service.find_project_or_raise(ref)

    projects = service.list_projects()
    if len(projects) == 1:
        return projects[0]
    if not projects:
        raise InvalidInputError("No projects yet. Create one with: laneboard project add <name>")
    raise InvalidInputError("Several projects exist; pick one with --project <name|id>")


@app.callback(invoke_without_command=True)
def default_command(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
):
    """
    Default callback - configures logging and launches the REPL when no
    command is specified.
    """
    setup_logging("DEBUG" if verbose else get_settings().log_level)

    if ctx.invoked_subcommand is None:
        from ..repl import main as repl_main
        try:
            repl_main()
        except Exception as e:
            error_console.print(f"[red]Error starting REPL:[/red] {e}")
            raise typer.Exit(1)



"""
FILE: laneboard/cli/commands/projects.py
PURPOSE: Project and sprint commands (project add/ls, sprint add/ls/use)
"""

import json
from typing import Optional

import typer
from rich.table import Table

from ..app import console, error_console, project_app, sprint_app, resolve_project
from ...core import service
from ...core.exceptions import InvalidInputError, LaneboardError
from ...formatting import print_json


@project_app.command("add")
def project_add(
    name: str = typer.Argument(..., help="Project name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a new project.

    Example:
        laneboard project add "Web App"
        laneboard project add "Mobile" --json
    """
    try:
        project = service.create_project(name)

        if json_output:
            print_json(console, project.to_json())
        elif raw:
            console.print(f"{project.id}: {project.name}")
        else:
            console.print(f"[green]✓[/green] Created project {project.id}: {project.name}")

    except InvalidInputError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except LaneboardError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@project_app.command("ls")
def project_ls(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    List all projects.

    Example:
        laneboard project ls
        laneboard project ls --json
    """
    try:
        projects = service.list_projects()

        if json_output:
            projects_data = [
                {"id": p.id, "name": p.name, "created_at": p.created_at}
                for p in projects
            ]
            print_json(console, projects_data)

        elif raw:
            for project in projects:
                console.print(f"{project.id}: {project.name}")

        else:
            if not projects:
                console.print("[dim]No projects found[/dim]")
                return

            table = Table(title="Projects")
            table.add_column("ID", style="cyan", no_wrap=True)
            table.add_column("Name", style="white")
            table.add_column("Created", style="dim")

            for project in projects:
                created_display = project.created_at.split("T")[0] if project.created_at else ""
                table.add_row(str(project.id), project.name, created_display)

            console.print(table)
            console.print(f"\n[dim]Total: {len(projects)} project(s)[/dim]")

    except LaneboardError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@sprint_app.command("add")
def sprint_add(
    name: str = typer.Argument(..., help="Sprint name"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    active: bool = typer.Option(False, "--active", help="Make this the active sprint"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a sprint. The first sprint of a project becomes active.

    Example:
        laneboard sprint add "Sprint 1"
        laneboard sprint add "Sprint 2" --active
    """
    try:
        proj = resolve_project(project)
        sprint = service.create_sprint(proj.id, name, active=active)

        if json_output:
            print_json(console, sprint.to_json())
        elif raw:
            console.print(f"{sprint.id}: {sprint.name}")
        else:
            marker = " [magenta](active)[/magenta]" if sprint.is_active else ""
            console.print(f"[green]✓[/green] Created sprint {sprint.id}: {sprint.name}{marker}")

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@sprint_app.command("ls")
def sprint_ls(
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """List a project's sprints."""
    try:
        proj = resolve_project(project)
        sprints = service.list_sprints(proj.id)

        if json_output:
            print_json(console, [json.loads(s.to_json()) for s in sprints])
        elif raw:
            for sprint in sprints:
                flag = "*" if sprint.is_active else " "
                console.print(f"{sprint.id}: [{flag}] {sprint.name}")
        else:
            if not sprints:
                console.print("[dim]No sprints found[/dim]")
                return

            table = Table(title=f"Sprints - {proj.name}")
            table.add_column("ID", style="cyan", no_wrap=True)
            table.add_column("Name", style="white")
            table.add_column("Active", style="magenta")
            for sprint in sprints:
                table.add_row(str(sprint.id), sprint.name, "yes" if sprint.is_active else "")
            console.print(table)

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@sprint_app.command("use")
def sprint_use(
    sprint_id: int = typer.Argument(..., help="Sprint ID to activate"),
):
    """Make a sprint the active sprint of its project."""
    try:
        sprint = service.activate_sprint(sprint_id)
        console.print(f"[green]✓[/green] Sprint {sprint.id}: {sprint.name} is now active")
    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

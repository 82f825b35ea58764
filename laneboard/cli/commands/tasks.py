"""
FILE: laneboard/cli/commands/tasks.py
PURPOSE: Task commands (task add, task ls, task mv)
"""

import json
from dataclasses import asdict
from typing import Optional

import typer
from rich.table import Table

from ..app import console, error_console, task_app, resolve_project
from ...core import service
from ...core.exceptions import LaneboardError
from ...core.mapper import status_to_column
from ...formatting import print_json, task_line


@task_app.command("add")
def task_add(
    story_id: int = typer.Argument(..., help="Parent story ID"),
    title: str = typer.Argument(..., help="Task title"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a task under a story. New tasks start in To Do.

    Example:
        laneboard task add 1 "Write tests"
    """
    try:
        task = service.create_task(story_id, title)

        if json_output:
            print_json(console, task.to_json())
        elif raw:
            console.print(task_line(task))
        else:
            console.print(
                f"[green]✓[/green] Created task {task.id}: {task.title} "
                f"[dim](story {task.story_id}, #{task.task_number})[/dim]"
            )

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@task_app.command("ls")
def task_ls(
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """List every task of a project with the lane it shows in."""
    try:
        proj = resolve_project(project)
        tasks = service.list_tasks(proj.id)

        if json_output:
            print_json(console, [json.loads(t.to_json()) for t in tasks])
            return
        if raw:
            for task in tasks:
                console.print(task_line(task))
            return

        if not tasks:
            console.print("[dim]No tasks found[/dim]")
            return

        registry = service.get_registry(proj.id)
        lanes = registry.list_lanes()

        table = Table(title=f"Tasks - {proj.name}")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Story", style="dim", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Lane", style="magenta")
        for task in tasks:
            column = status_to_column(task.status, lanes)
            lane = registry.find_by_status(column.status_value)
            lane_display = lane.title if lane else f"[yellow]orphaned ({task.status})[/yellow]"
            table.add_row(str(task.id), str(task.story_id), task.title, lane_display)
        console.print(table)

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@task_app.command("mv")
def task_mv(
    task_id: int = typer.Argument(..., help="Task ID"),
    target: str = typer.Argument(..., help="Column key (todo, inprogress, qa, done) or lane title"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Move a task to a fixed column or a custom lane.

    Example:
        laneboard task mv 5 inprogress
        laneboard task mv 5 "Design Review"
    """
    try:
        result = service.move_task(task_id, target)

        if json_output:
            print_json(console, asdict(result))
        else:
            console.print(
                f"[green]✓[/green] Moved task {task_id}: "
                f"{result.previous_status} → [cyan]{result.new_status}[/cyan]"
            )

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

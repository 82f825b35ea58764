"""
FILE: laneboard/cli/commands/stories.py
PURPOSE: Story commands (story add, story ls, story mv)
"""

import json
from dataclasses import asdict
from typing import Optional

import typer
from rich.table import Table

from ..app import console, error_console, story_app, resolve_project
from ...core import service
from ...core.exceptions import LaneboardError
from ...formatting import print_json, story_line


@story_app.command("add")
def story_add(
    title: str = typer.Argument(..., help="Story title"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    sprint: Optional[int] = typer.Option(None, "--sprint", "-s", help="Sprint ID (default: active sprint)"),
    backlog: bool = typer.Option(False, "--backlog", help="Add to the backlog instead of a sprint"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a story in the active sprint (or the backlog).

    Example:
        laneboard story add "Checkout flow"
        laneboard story add "Dark mode" --backlog
    """
    try:
        proj = resolve_project(project)
        story = service.create_story(proj.id, title, sprint_id=sprint, backlog=backlog)

        if json_output:
            print_json(console, story.to_json())
        elif raw:
            console.print(story_line(story))
        else:
            where = "backlog" if story.in_backlog else f"sprint {story.sprint_id}"
            console.print(f"[green]✓[/green] Created story {story.id}: {story.title} [dim]({where})[/dim]")

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@story_app.command("ls")
def story_ls(
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """List a project's stories in creation order."""
    try:
        proj = resolve_project(project)
        stories = service.list_stories(proj.id)

        if json_output:
            print_json(console, [json.loads(s.to_json()) for s in stories])
        elif raw:
            for story in stories:
                console.print(story_line(story))
        else:
            if not stories:
                console.print("[dim]No stories found[/dim]")
                return

            table = Table(title=f"Stories - {proj.name}")
            table.add_column("ID", style="cyan", no_wrap=True)
            table.add_column("Title", style="white")
            table.add_column("Status", style="magenta")
            table.add_column("Sprint", style="dim")
            for story in stories:
                sprint_display = str(story.sprint_id) if story.sprint_id is not None else "-"
                table.add_row(str(story.id), story.title, story.status, sprint_display)
            console.print(table)

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@story_app.command("mv")
def story_mv(
    story_id: int = typer.Argument(..., help="Story ID"),
    target: str = typer.Argument(..., help="backlog, stories, todo, inprogress, qa or done"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Move a story between backlog, stories and the fixed stage columns.

    Moving to backlog removes the story from its sprint; moving from the
    backlog to stories puts it in the active sprint.

    Example:
        laneboard story mv 3 backlog
    """
    try:
        result = service.move_story(story_id, target)

        if json_output:
            print_json(console, asdict(result))
        else:
            console.print(
                f"[green]✓[/green] Moved story {story_id}: "
                f"{result.previous_status} → [cyan]{result.new_status}[/cyan]"
            )

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

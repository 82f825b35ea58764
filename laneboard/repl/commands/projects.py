"""
FILE: laneboard/repl/commands/projects.py
PURPOSE: Project command handlers for REPL (use, project add/ls)
"""

import asyncio

from rich.table import Table

from ..context import console, repl_context
from ..parser import ParseResult
from ...core import service
from ...core.exceptions import InvalidInputError, LaneboardError


async def handle_use_command(result: ParseResult) -> None:
    """
    Handle 'use' command - open a project's board.

    Starts the 30 second refresher for that board.

    Usage:
        use Web
        use "Web App" --sprint 2
        use Web --backlog
    """
    if not result.args:
        console.print("[red]Error:[/red] Project name or ID required")
        console.print("[dim]Usage: use <project> [--sprint ID] [--backlog][/dim]")
        return

    try:
        project = await asyncio.to_thread(service.find_project_or_raise, " ".join(result.args))
        snapshot = await repl_context.open_project(
            project,
            sprint_id=result.flags.get("sprint"),
            include_backlog=result.flags.get("backlog", False),
        )
    except LaneboardError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    sprint_label = f"sprint {snapshot.sprint_id}" if snapshot.sprint_id else "no active sprint"
    console.print(f"[green]✓ Using project:[/green] [cyan]{project.name}[/cyan] [dim]({sprint_label})[/dim]")


async def handle_project_add_command(result: ParseResult) -> None:
    """
    Handle 'project add' command - create new project.

    Usage:
        project add "Web App"
    """
    if len(result.args) < 2:
        console.print("[red]Error:[/red] Project name required")
        console.print("[dim]Usage: project add <name>[/dim]")
        return

    name = " ".join(result.args[1:])

    try:
        project = await asyncio.to_thread(service.create_project, name)
        console.print(f"[green]✓ Created project:[/green] [cyan]{project.id}[/cyan]: {project.name}")
    except InvalidInputError as e:
        console.print(f"[red]Error:[/red] {e}")
    except LaneboardError as e:
        console.print(f"[red]Unexpected error:[/red] {e}")


async def handle_project_ls_command(result: ParseResult) -> None:
    """
    Handle 'project ls' command - list projects.
    """
    try:
        projects = await asyncio.to_thread(service.list_projects)
    except LaneboardError as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        return

    if not projects:
        console.print("[dim]No projects found[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="cyan", width=6)
    table.add_column("Name", style="white")
    current = repl_context.current_project
    for project in projects:
        marker = " [magenta]*[/magenta]" if current and current.id == project.id else ""
        table.add_row(str(project.id), project.name + marker)
    console.print(table)


async def handle_project_command(result: ParseResult) -> None:
    """
    Handle 'project' command - dispatch to add/ls.
    """
    subcommand = result.args[0].lower() if result.args else "ls"
    if subcommand == "add":
        await handle_project_add_command(result)
    elif subcommand == "ls":
        await handle_project_ls_command(result)
    else:
        console.print(f"[red]Unknown project command:[/red] {subcommand}")
        console.print("[dim]Usage: project add <name> | project ls[/dim]")

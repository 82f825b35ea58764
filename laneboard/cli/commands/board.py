"""
FILE: laneboard/cli/commands/board.py
PURPOSE: Board command (story x lane grid)
"""

from typing import Optional

import typer

from ..app import app, console, error_console, resolve_project
from ...core import service
from ...core.exceptions import LaneboardError
from ...formatting import BoardFormatter, print_json


@app.command()
def board(
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    sprint: Optional[int] = typer.Option(None, "--sprint", "-s", help="Sprint ID (default: active sprint)"),
    backlog: bool = typer.Option(False, "--backlog", help="Include backlog stories"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Show the board: one row per story, one column per lane.

    Lane headers show the task count and the WIP limit; lanes over their
    limit are flagged in red.

    Example:
        laneboard board
        laneboard board --backlog --json
    """
    try:
        proj = resolve_project(project)
        snapshot, grid = service.load_board(proj.id, sprint, include_backlog=backlog)

        if json_output:
            print_json(console, BoardFormatter.to_json_dict(grid))
            return
        if raw:
            for line in BoardFormatter.to_raw_lines(grid):
                console.print(line, markup=False, highlight=False)
            return

        if snapshot.sprint_id is None and not backlog:
            console.print("[dim]No active sprint. Use --backlog to see backlog stories.[/dim]")
        console.print(BoardFormatter.create_table(grid, title=f"Board - {proj.name}"))
        warning = BoardFormatter.orphan_warning(grid)
        if warning:
            console.print(warning)

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

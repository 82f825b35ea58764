"""
FILE: laneboard/cli/commands/lanes.py
PURPOSE: Workflow lane commands (lane add, ls, edit, rm, reorder)
"""

from typing import List, Optional

import typer

from ..app import console, error_console, lane_app, resolve_project
from ...core import service
from ...core.exceptions import InvalidInputError, LaneboardError
from ...formatting import LaneFormatter, print_json


@lane_app.command("add")
def lane_add(
    title: str = typer.Argument(..., help="Lane title"),
    after: str = typer.Option("qa", "--after", "-a", help="Place after 'inprogress' or 'qa'"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    color: Optional[str] = typer.Option(None, "--color", "-c", help="Hex colour, e.g. #F59E0B"),
    objective: Optional[str] = typer.Option(None, "--objective", "-o", help="What the lane is for"),
    wip: Optional[int] = typer.Option(None, "--wip", help="Enable a WIP limit"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Add a custom lane after In Progress or after QA.

    Lane titles must be unique within a project (case-insensitive).

    Example:
        laneboard lane add "Design Review" --after inprogress
        laneboard lane add "UAT" --after qa --wip 3 --color "#F59E0B"
    """
    try:
        proj = resolve_project(project)
        lane = service.create_lane(
            proj.id, title, after, color=color, objective=objective, wip_limit=wip
        )

        if json_output:
            print_json(console, LaneFormatter.to_json_dict(lane))
        elif raw:
            console.print("\n".join(LaneFormatter.to_raw_lines([lane])))
        else:
            console.print(
                f"[green]✓[/green] Created lane [bold]{lane.title}[/bold] "
                f"[dim]({lane.status_value}, order {lane.display_order})[/dim]"
            )

    except InvalidInputError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except LaneboardError as e:
        error_console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@lane_app.command("ls")
def lane_ls(
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    List lanes in board order (fixed stages and custom lanes).

    Example:
        laneboard lane ls --json
    """
    try:
        proj = resolve_project(project)
        lanes = service.get_registry(proj.id).list_lanes()

        if json_output:
            print_json(console, [LaneFormatter.to_json_dict(l) for l in lanes])
        elif raw:
            for line in LaneFormatter.to_raw_lines(lanes):
                console.print(line, markup=False)
        else:
            console.print(LaneFormatter.create_table(lanes, title=f"Lanes - {proj.name}"))

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@lane_app.command("edit")
def lane_edit(
    lane: str = typer.Argument(..., help="Lane title, status value or ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    color: Optional[str] = typer.Option(None, "--color", "-c", help="New hex colour"),
    objective: Optional[str] = typer.Option(None, "--objective", "-o", help="New objective"),
    wip: Optional[int] = typer.Option(None, "--wip", help="Set and enable the WIP limit"),
    no_wip: bool = typer.Option(False, "--no-wip", help="Disable the WIP limit"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Edit a custom lane. The status value never changes.

    Example:
        laneboard lane edit "Design Review" --title "Design QA"
        laneboard lane edit "UAT" --no-wip
    """
    try:
        proj = resolve_project(project)
        updated = service.update_lane(
            proj.id,
            lane,
            title=title,
            color=color,
            objective=objective,
            wip_limit=wip,
            clear_wip=no_wip,
        )

        if json_output:
            print_json(console, LaneFormatter.to_json_dict(updated))
        else:
            console.print(f"[green]✓[/green] Updated lane [bold]{updated.title}[/bold]")

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@lane_app.command("rm")
def lane_rm(
    lane: str = typer.Argument(..., help="Lane title, status value or ID"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation prompt"),
):
    """
    Delete a custom lane. Its tasks keep their status and show as orphaned.

    Example:
        laneboard lane rm "UAT" --yes
    """
    try:
        proj = resolve_project(project)
        if not yes:
            if not typer.confirm(f"Delete lane '{lane}'?", default=False):
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(0)

        orphaned = service.delete_lane(proj.id, lane)
        console.print(f"[red]✗[/red] Deleted lane {lane}")
        if orphaned:
            console.print(
                f"[yellow]Warning:[/yellow] {orphaned} task(s) still use this lane's status "
                "and are hidden until moved"
            )

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@lane_app.command("reorder")
def lane_reorder(
    lanes: List[str] = typer.Argument(..., help="Every custom lane, in the new order"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project name or ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Reorder custom lanes. Each lane stays in its section.

    Example:
        laneboard lane reorder "Security Review" "Design Review" "UAT"
    """
    try:
        proj = resolve_project(project)
        ordered = service.reorder_lanes(proj.id, lanes)

        if json_output:
            print_json(console, [LaneFormatter.to_json_dict(l) for l in ordered])
        else:
            console.print(LaneFormatter.create_table(ordered, title=f"Lanes - {proj.name}"))

    except LaneboardError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

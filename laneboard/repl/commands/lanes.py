"""
FILE: laneboard/repl/commands/lanes.py
PURPOSE: Lane management handlers for REPL (lane add/edit/rm/reorder)
NOTES:
  - Service calls and the delete confirmation run in a worker thread,
    so the board refresher keeps ticking while they wait
"""

import asyncio

from ..context import console, repl_context
from ..parser import ParseResult
from ...core import service
from ...core.exceptions import LaneboardError, PersistenceError


async def _refresh_after_change() -> None:
    try:
        await repl_context.refresh("lane change")
    except PersistenceError as e:
        console.print(f"[yellow]Board not refreshed:[/yellow] {e}")


async def _confirm(question: str) -> bool:
    response = await asyncio.to_thread(input, f"{question} (y/n): ")
    return response.strip().lower() in ("y", "yes")


async def _lane_add(project_id: int, result: ParseResult) -> bool:
    if len(result.args) < 2:
        console.print("[red]Error:[/red] Lane title required")
        console.print('[dim]Usage: lane add "Title" [--after inprogress|qa] [--wip N] [--color #HEX][/dim]')
        return False

    lane = await asyncio.to_thread(
        service.create_lane,
        project_id,
        " ".join(result.args[1:]),
        result.flags.get("after", "qa"),
        color=result.flags.get("color"),
        objective=result.flags.get("objective"),
        wip_limit=result.flags.get("wip"),
    )
    console.print(
        f"[green]✓ Created lane:[/green] [bold]{lane.title}[/bold] "
        f"[dim]({lane.status_value}, order {lane.display_order})[/dim]"
    )
    return True


async def _lane_edit(project_id: int, result: ParseResult) -> bool:
    if len(result.args) < 2:
        console.print("[red]Error:[/red] Lane required")
        console.print('[dim]Usage: lane edit "Title" [--title New] [--wip N | --no-wip] [--color #HEX][/dim]')
        return False

    lane = await asyncio.to_thread(
        service.update_lane,
        project_id,
        " ".join(result.args[1:]),
        title=result.flags.get("title"),
        color=result.flags.get("color"),
        objective=result.flags.get("objective"),
        wip_limit=result.flags.get("wip"),
        clear_wip=result.flags.get("no-wip", False),
    )
    console.print(f"[green]✓ Updated lane:[/green] [bold]{lane.title}[/bold]")
    return True


async def _lane_rm(project_id: int, result: ParseResult) -> bool:
    if len(result.args) < 2:
        console.print("[red]Error:[/red] Lane required")
        console.print('[dim]Usage: lane rm "Title"[/dim]')
        return False

    ref = " ".join(result.args[1:])
    if not await _confirm(f"Delete lane '{ref}'?"):
        console.print("[yellow]Cancelled[/yellow]")
        return False

    orphaned = await asyncio.to_thread(service.delete_lane, project_id, ref)
    console.print(f"[red]✗[/red] Deleted lane {ref}")
    if orphaned:
        console.print(f"[yellow]{orphaned} task(s) keep the deleted status and are hidden[/yellow]")
    return True


async def _lane_reorder(project_id: int, result: ParseResult) -> bool:
    refs = result.args[1:]
    if not refs:
        console.print("[red]Error:[/red] List every custom lane in the new order")
        console.print('[dim]Usage: lane reorder "UAT" "Design Review" ...[/dim]')
        return False

    lanes = await asyncio.to_thread(service.reorder_lanes, project_id, refs)
    custom = [l.title for l in lanes if not l.is_fixed]
    console.print(f"[green]✓ Lane order:[/green] {' → '.join(custom)}")
    return True


_SUBCOMMANDS = {
    "add": _lane_add,
    "edit": _lane_edit,
    "rm": _lane_rm,
    "reorder": _lane_reorder,
}


async def handle_lane_command(result: ParseResult) -> None:
    """
    Handle 'lane' command - manage custom lanes of the open project.

    Usage:
        lane add "Design Review" --after inprogress
        lane edit "Design Review" --wip 3
        lane rm "UAT"
        lane reorder "Security Review" "Design Review"
    """
    if not result.args or result.args[0] not in _SUBCOMMANDS:
        console.print("[red]Error:[/red] Unknown lane command")
        console.print("[dim]Usage: lane add|edit|rm|reorder ...[/dim]")
        return

    project = repl_context.current_project
    if project is None:
        console.print("[red]Error:[/red] No project selected. Use: use <project>")
        return

    try:
        changed = await _SUBCOMMANDS[result.args[0]](project.id, result)
    except LaneboardError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    if changed:
        await _refresh_after_change()

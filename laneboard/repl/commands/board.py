"""
FILE: laneboard/repl/commands/board.py
PURPOSE: Board command handlers for REPL (board, lanes, mv, smv, refresh)
"""

from ..context import console, repl_context
from ..parser import ParseResult
from ...core import service
from ...core.constants import ITEM_STORY, ITEM_TASK
from ...core.exceptions import (
    InvalidMoveError,
    LaneboardError,
    MoveAlreadyInProgressError,
    PersistenceError,
)
from ...formatting import BoardFormatter, LaneFormatter


def handle_board_command(result: ParseResult) -> None:
    """
    Handle 'board' command - render the open board.

    Pending moves are shown at their target lane until the next refresh.

    Usage:
        board
    """
    try:
        controller = repl_context.require_board()
    except LaneboardError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    board = controller.current_board()
    title = f"Board - {repl_context.current_project.name}"
    console.print(BoardFormatter.create_table(board, title=title))

    warning = BoardFormatter.orphan_warning(board)
    if warning:
        console.print(warning)

    refresher = repl_context.refresher
    if refresher is not None and refresher.last_error is not None:
        console.print(f"[yellow]Last refresh failed:[/yellow] {refresher.last_error}")


def handle_lanes_command(result: ParseResult) -> None:
    """
    Handle 'lanes' command - list lanes of the open board in order.

    Usage:
        lanes
    """
    try:
        controller = repl_context.require_board()
    except LaneboardError as e:
        console.print(f"[red]Error:[/red] {e}")
        return

    lanes = list(controller.snapshot.lanes)
    console.print(LaneFormatter.create_table(lanes))


async def _move(result: ParseResult, item_type: str, usage: str) -> None:
    if len(result.args) < 2:
        console.print("[red]Error:[/red] Item ID and target required")
        console.print(f"[dim]Usage: {usage}[/dim]")
        return

    try:
        item_id = int(result.args[0])
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid ID: {result.args[0]}")
        return

    try:
        controller = repl_context.require_board()
        target = service.resolve_column_key(
            controller.snapshot.registry, " ".join(result.args[1:])
        )
        move = await controller.apply_move(item_id, item_type, target)
        console.print(
            f"[green]✓[/green] Moved {item_type} {item_id}: "
            f"{move.previous_status} → [cyan]{move.new_status}[/cyan]"
        )
    except InvalidMoveError as e:
        console.print(f"[yellow]{e}[/yellow]")
    except MoveAlreadyInProgressError as e:
        console.print(f"[yellow]{e}[/yellow]")
    except PersistenceError as e:
        console.print(f"[red]Move failed:[/red] {e}")
        console.print("[dim]Re-fetching the board...[/dim]")
        try:
            await repl_context.refresh("after failed move")
        except PersistenceError as refresh_error:
            console.print(f"[red]Refresh failed:[/red] {refresh_error}")
    except LaneboardError as e:
        console.print(f"[red]Error:[/red] {e}")


async def handle_mv_command(result: ParseResult) -> None:
    """
    Handle 'mv' command - move a task to a fixed column or custom lane.

    Usage:
        mv 12 inprogress
        mv 12 "Design Review"
    """
    await _move(result, ITEM_TASK, "mv <task_id> <column|lane title>")


async def handle_smv_command(result: ParseResult) -> None:
    """
    Handle 'smv' command - move a story.

    Usage:
        smv 3 backlog
        smv 3 stories
    """
    await _move(result, ITEM_STORY, "smv <story_id> backlog|stories|todo|inprogress|qa|done")


async def handle_refresh_command(result: ParseResult) -> None:
    """
    Handle 'refresh' command - fetch a new snapshot now.

    Usage:
        refresh
    """
    if repl_context.refresher is None:
        console.print("[red]Error:[/red] No project selected. Use: use <project>")
        return

    try:
        snapshot = await repl_context.refresh()
        console.print(f"[dim]Board refreshed (v{snapshot.version})[/dim]")
    except PersistenceError as e:
        console.print(f"[red]Refresh failed:[/red] {e}")

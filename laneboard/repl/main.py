"""
FILE: laneboard/repl/main.py
PURPOSE: Interactive REPL for boards and lanes with prompt-toolkit
EXPORTS:
  - main() - Entry point for REPL mode
  - run_repl() - Main REPL loop (coroutine)
  - execute_command(result) - Dispatch one parsed command (coroutine)
DEPENDENCIES:
  - prompt_toolkit (REPL interface, history, completion)
  - rich (formatted output)
  - laneboard.repl.context (session state, board refresher)
  - laneboard.repl.parser / completer / commands
NOTES:
  - Runs on asyncio so the board refresher ticks while waiting for input
  - Returning to the prompt counts as regaining focus: a refresh is scheduled
  - Database work happens in worker threads, completion included
  - Bottom toolbar shows the snapshot version and refresh status
  - Ctrl+D or "exit"/"quit" to exit
"""

import asyncio
import inspect
import logging
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from ..core import service
from ..core.exceptions import LaneboardError
from .commands import (
    handle_board_command,
    handle_clear_command,
    handle_help_command,
    handle_lane_command,
    handle_lanes_command,
    handle_mv_command,
    handle_project_command,
    handle_refresh_command,
    handle_smv_command,
    handle_use_command,
)
from .completer import create_completer
from .context import console, repl_context
from .parser import ParseResult, parse_command


logger = logging.getLogger(__name__)


def format_prompt() -> HTML:
    """
    Create formatted prompt text with context and colors.

    Returns:
        HTML prompt: "laneboard> " or "laneboard:[project]> " with cyan project
    """
    project = repl_context.current_project
    if project is None:
        return HTML("<b>laneboard&gt; </b>")
    suffix = " | backlog" if repl_context.include_backlog else ""
    return HTML(f"<b>laneboard:[<cyan>{project.name}</cyan>{suffix}]&gt; </b>")


def get_bottom_toolbar() -> HTML:
    """Toolbar with snapshot version and refresh status."""
    refresher = repl_context.refresher
    if refresher is None or refresher.latest is None:
        return HTML("<style bg='#444444' fg='#ffffff'> No board open - type 'use &lt;project&gt;' </style>")

    snapshot = refresher.latest
    status = f"board v{snapshot.version} | fetched {snapshot.fetched_at[11:19]}"
    if refresher.last_error is not None:
        status += " | last refresh failed"
    return HTML(f"<style bg='#444444' fg='#ffffff'> {status} </style>")


def _current_snapshot():
    controller = repl_context.controller
    return controller.snapshot if controller is not None else None


HANDLERS = {
    "board": handle_board_command,
    "lanes": handle_lanes_command,
    "mv": handle_mv_command,
    "smv": handle_smv_command,
    "lane": handle_lane_command,
    "refresh": handle_refresh_command,
    "use": handle_use_command,
    "project": handle_project_command,
    "help": handle_help_command,
    "clear": handle_clear_command,
}


async def execute_command(result: ParseResult) -> bool:
    """
    Execute a parsed command.

    Args:
        result: Parsed command from parser

    Returns:
        True to continue REPL loop, False to exit
    """
    command = result.command.lower()

    if command in ("exit", "quit"):
        console.print("[dim]Goodbye![/dim]")
        return False

    if not command:
        return True

    handler = HANDLERS.get(command)
    if handler and not result.ok:
        for error in result.errors:
            console.print(f"[red]Error:[/red] {error}")
        console.print()
    elif handler:
        outcome = handler(result)
        if inspect.isawaitable(outcome):
            await outcome
        console.print()
    else:
        console.print(f"[red]Unknown command:[/red] {command}")
        console.print("[dim]Type 'help' for available commands[/dim]")
        console.print()

    return True


async def _auto_select_project() -> None:
    """Open the board straight away when there is a single project."""
    try:
        projects = await asyncio.to_thread(service.list_projects)
        if len(projects) == 1:
            await repl_context.open_project(projects[0])
            console.print(f"[dim]Using project {projects[0].name}[/dim]")
    except LaneboardError as e:
        console.print(f"[yellow]Warning:[/yellow] {e}")


async def run_repl() -> None:
    """
    Main REPL loop.

    Exits on:
    - Ctrl+D (EOFError)
    - "exit" or "quit" commands
    """
    has_tty = sys.stdin.isatty() and sys.stdout.isatty()

    session = None
    if has_tty:
        session = PromptSession(
            history=InMemoryHistory(),
            completer=create_completer(_current_snapshot),
            complete_while_typing=True,
            complete_in_thread=True,
            bottom_toolbar=get_bottom_toolbar,
        )

    console.print("[bold cyan]Laneboard REPL[/bold cyan] - Type 'help' for commands, 'exit' to quit")
    if session is None:
        console.print("[dim](Running in simple mode - no autocomplete)[/dim]")
    console.print()

    await _auto_select_project()

    try:
        while True:
            try:
                if session is not None:
                    with patch_stdout():
                        user_input = await session.prompt_async(format_prompt())
                else:
                    user_input = await asyncio.to_thread(input, repl_context.get_prompt())

                if not await execute_command(parse_command(user_input)):
                    break

                repl_context.notify_focus()

            except KeyboardInterrupt:
                console.print("[dim]^C (Press Ctrl+D or type 'exit' to quit)[/dim]")
                continue
            except EOFError:
                console.print()
                console.print("[dim]Goodbye![/dim]")
                break
            except LaneboardError as e:
                console.print(f"[red]Error:[/red] {e}")
    finally:
        await repl_context.close()


def main() -> None:
    """
    Entry point for REPL mode.

    Called when user runs: laneboard repl
    """
    try:
        asyncio.run(run_repl())
    except Exception as e:
        logger.exception("REPL crashed")
        console.print(f"[red]Fatal error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
FILE: laneboard/repl/commands/system.py
PURPOSE: System command handlers for REPL (help, clear)
"""

from ..context import console
from ..parser import ParseResult


def handle_help_command(result: ParseResult) -> None:
    """Handle 'help' command - show available commands."""
    console.print("\n[bold cyan]Laneboard REPL[/bold cyan]\n")

    commands = [
        ("use <project>", "Open a project's board (--sprint ID, --backlog)"),
        ("board", "Show the board"),
        ("lanes", "List lanes in board order"),
        ("mv <task> <lane>", "Move a task (todo, inprogress, qa, done or a lane title)"),
        ("smv <story> <col>", "Move a story (backlog, stories, todo, inprogress, qa, done)"),
        ('lane add "T"', "Add a lane (--after inprogress|qa, --wip N, --color #HEX)"),
        ('lane edit "T"', "Edit a lane (--title, --wip N, --no-wip, --color, --objective)"),
        ('lane rm "T"', "Delete a lane (its tasks become orphaned)"),
        ("lane reorder ...", "Reorder all custom lanes"),
        ("project add|ls", "Manage projects"),
        ("refresh", "Re-fetch the board now"),
        ("clear", "Clear the screen"),
        ("exit", "Exit (or Ctrl+D)"),
    ]
    for cmd, desc in commands:
        console.print(f"  [green]{cmd:20}[/green] {desc}")

    console.print("\n[dim]The board also refreshes every 30 seconds and after each command.[/dim]")


def handle_clear_command(result: ParseResult) -> None:
    """Handle 'clear' command - clear the screen."""
    console.clear()

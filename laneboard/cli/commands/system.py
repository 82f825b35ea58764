"""
FILE: laneboard/cli/commands/system.py
PURPOSE: System commands (version, help, repl)
"""

import typer

from ..app import app, console, error_console
from ... import __version__


@app.command()
def version():
    """Show Laneboard version."""
    console.print(f"Laneboard v{__version__}")


@app.command()
def help():
    """Show available commands and usage."""
    console.print("\n[bold cyan]Laneboard[/bold cyan] - Scrum/Kanban board with custom workflow lanes\n")
    console.print(f"[dim]Version {__version__}[/dim]\n")

    console.print("[bold]Usage:[/bold]")
    console.print("  laneboard [command] [options]")
    console.print("  laneboard                    [dim]# Launch interactive REPL (default)[/dim]\n")

    console.print("[bold]Commands:[/bold]")

    commands = [
        ("project add", "Create a project", 'laneboard project add "Web App"'),
        ("project ls", "List projects", "laneboard project ls"),
        ("sprint add", "Create a sprint", 'laneboard sprint add "Sprint 1" [--active]'),
        ("sprint ls", "List sprints", "laneboard sprint ls"),
        ("sprint use", "Make a sprint active", "laneboard sprint use <sprint_id>"),
        ("story add", "Create a story", 'laneboard story add "Checkout flow" [--backlog]'),
        ("story ls", "List stories", "laneboard story ls"),
        ("story mv", "Move a story", "laneboard story mv <story_id> backlog|stories|todo|..."),
        ("task add", "Create a task", 'laneboard task add <story_id> "Write tests"'),
        ("task ls", "List tasks", "laneboard task ls"),
        ("task mv", "Move a task to a lane", 'laneboard task mv <task_id> "Design Review"'),
        ("lane add", "Add a custom lane", 'laneboard lane add "Design Review" --after inprogress'),
        ("lane ls", "List lanes in board order", "laneboard lane ls"),
        ("lane edit", "Edit a custom lane", 'laneboard lane edit "Design Review" --wip 3'),
        ("lane rm", "Delete a custom lane", 'laneboard lane rm "Design Review"'),
        ("lane reorder", "Reorder custom lanes", 'laneboard lane reorder "UAT" "Design Review"'),
        ("board", "Show the board", "laneboard board [--sprint ID] [--backlog]"),
        ("repl", "Launch interactive REPL", "laneboard repl"),
        ("version", "Show version", "laneboard version"),
        ("help", "Show this help message", "laneboard help"),
    ]

    for cmd, desc, example in commands:
        console.print(f"  [green]{cmd:13}[/green] {desc}")
        console.print(f"                [dim]{example}[/dim]\n")

    console.print("[bold]Global Options:[/bold]")
    console.print("  [yellow]--project[/yellow] Project name or id (optional with a single project)")
    console.print("  [yellow]--json[/yellow]    Output as JSON (for scripting)")
    console.print("  [yellow]--raw[/yellow]     Plain text output (no colors)")
    console.print("  [yellow]--help[/yellow]    Show detailed help for a command\n")


@app.command()
def repl():
    """
    Launch interactive REPL mode.

    The REPL provides:
    - Command history and autocomplete
    - A board that refreshes every 30 seconds and after each command
    - Exit with Ctrl+D or type 'exit'

    Example:
        laneboard repl
    """
    # Import here to avoid loading REPL dependencies for one-shot commands
    from ...repl import main as repl_main

    try:
        repl_main()
    except Exception as e:
        error_console.print(f"[red]Error starting REPL:[/red] {e}")
        raise typer.Exit(1)

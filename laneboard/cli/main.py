"""
FILE: laneboard/cli/main.py
PURPOSE: CLI entry point; registers every command module on the Typer app
EXPORTS:
  - app (re-exported from laneboard.cli.app)
  - main() (entry point)
NOTES:
  - Command modules decorate functions on the groups defined in cli/app.py
  - Run with: laneboard ... or python -m laneboard.cli.main ...
"""

from .app import app

# Import command modules to register commands with app
from .commands import (  # noqa: F401
    system,
    projects,
    stories,
    tasks,
    lanes,
    board,
)


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()

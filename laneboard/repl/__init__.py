"""
FILE: laneboard/repl/__init__.py
PURPOSE: REPL package for interactive board management
EXPORTS:
  - main() (from repl.main)
DEPENDENCIES:
  - prompt_toolkit (REPL interface)
  - rich (formatted output)
  - laneboard.core.service (business logic)
NOTES:
  - Entry point for interactive mode
  - Keeps the open board fresh while waiting for input
"""

from .main import main

__all__ = ["main"]

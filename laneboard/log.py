"""
FILE: laneboard/log.py
PURPOSE: Logging setup shared by the CLI and REPL
EXPORTS:
  - setup_logging(level) -> None
DEPENDENCIES:
  - logging (stdlib)
  - rich.logging (RichHandler)
NOTES:
  - Modules log through logging.getLogger(__name__) under the "laneboard" tree
  - Output goes to stderr so --json output on stdout stays clean
"""

import logging
from typing import Union

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: Union[str, int] = logging.WARNING) -> None:
    """Attach a rich stderr handler to the laneboard logger tree."""
    logger = logging.getLogger("laneboard")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False

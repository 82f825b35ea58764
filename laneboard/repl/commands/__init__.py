"""
FILE: laneboard/repl/commands/__init__.py
PURPOSE: REPL command handler modules
"""

# Export all command handlers for easy importing
from .board import (
    handle_board_command,
    handle_lanes_command,
    handle_mv_command,
    handle_smv_command,
    handle_refresh_command,
)
from .lanes import handle_lane_command
from .projects import (
    handle_use_command,
    handle_project_add_command,
    handle_project_ls_command,
    handle_project_command,
)
from .system import (
    handle_help_command,
    handle_clear_command,
)

__all__ = [
    "handle_board_command",
    "handle_lanes_command",
    "handle_mv_command",
    "handle_smv_command",
    "handle_refresh_command",
    "handle_lane_command",
    "handle_use_command",
    "handle_project_add_command",
    "handle_project_ls_command",
    "handle_project_command",
    "handle_help_command",
    "handle_clear_command",
]

"""
FILE: laneboard/repl/completer.py
PURPOSE: Autocomplete logic for REPL commands and arguments
EXPORTS:
  - LaneboardCompleter (Completer for command/arg completion)
  - create_completer(snapshot_provider) -> LaneboardCompleter
DEPENDENCIES:
  - prompt_toolkit.completion (Completer, Completion)
  - laneboard.core.service (for project name completion)
NOTES:
  - Suggests command names at start of line
  - Suggests subcommands after "lane" and "project"
  - Suggests task ids after "mv", story ids after "smv"
  - Suggests task column keys and lane titles after "mv <id>"
  - Suggests story columns after "smv <id>"
  - Suggests lane positions after "--after"
  - Ids and lane names come from the open board's snapshot, not the database
  - Case-insensitive matching
"""

import sqlite3
from typing import Callable, Iterable, List, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from ..core.constants import FIXED_COLUMNS, STORY_COLUMNS
from ..core.exceptions import LaneboardError
from ..core.models import WorkflowLane
from ..core.snapshot import BoardSnapshot
from .parser import flags_for

SnapshotProvider = Callable[[], Optional[BoardSnapshot]]


def _quote(name: str) -> str:
    return f'"{name}"' if " " in name else name


class LaneboardCompleter(Completer):
    """
    Custom completer for the Laneboard REPL.

    Provides context-aware autocomplete:
    - Command names at start of input
    - Subcommands for lane/project
    - Column keys and lane titles for moves
    """

    COMMANDS = [
        "board", "lanes", "mv", "smv", "lane", "project", "use",
        "refresh", "help", "clear", "exit", "quit",
    ]

    LANE_SUBCOMMANDS = ["add", "edit", "rm", "reorder"]
    PROJECT_SUBCOMMANDS = ["add", "ls"]
    LANE_POSITIONS = ["inprogress", "qa"]

    def __init__(self, snapshot_provider: Optional[SnapshotProvider] = None):
        self._snapshot_provider = snapshot_provider

    def _snapshot(self) -> Optional[BoardSnapshot]:
        return self._snapshot_provider() if self._snapshot_provider else None

    def _lanes(self) -> List[WorkflowLane]:
        snapshot = self._snapshot()
        return list(snapshot.lanes) if snapshot is not None else []

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on current input.

        Logic:
            1. At start -> commands
            2. "lane"/"project" -> subcommands
            3. "mv <id>" / "smv <id>" -> target columns
            4. after "--after" -> lane positions
            5. "use" -> project names
            6. otherwise -> flags for the command
        """
        text_before_cursor = document.text_before_cursor
        words = text_before_cursor.split()
        trailing_space = text_before_cursor.endswith(" ")

        if not words or (not trailing_space and len(words) == 1):
            word = words[0] if words else ""
            yield from self._complete_from(self.COMMANDS, word)
            return

        command = words[0].lower()
        current = "" if trailing_space else words[-1]
        position = len(words) if trailing_space else len(words) - 1

        if position == 1 and command == "lane":
            yield from self._complete_from(self.LANE_SUBCOMMANDS, current)
            return
        if position == 1 and command == "project":
            yield from self._complete_from(self.PROJECT_SUBCOMMANDS, current)
            return

        previous = words[-1] if trailing_space else (words[-2] if len(words) > 1 else "")
        if previous == "--after":
            yield from self._complete_from(self.LANE_POSITIONS, current)
            return

        if command == "mv" and position == 1:
            yield from self._complete_item_ids(current, stories=False)
            return
        if command == "smv" and position == 1:
            yield from self._complete_item_ids(current, stories=True)
            return
        if command == "mv" and position == 2:
            yield from self._complete_task_targets(current)
            return
        if command == "smv" and position == 2:
            yield from self._complete_from(list(STORY_COLUMNS), current)
            return
        if command == "lane" and position >= 2 and words[1] in ("edit", "rm", "reorder"):
            if not current.startswith("--"):
                yield from self._complete_lane_titles(current, custom_only=True)
                return
        if command == "use" and position == 1:
            yield from self._complete_project_names(current)
            return

        if current.startswith("--") or trailing_space:
            yield from self._complete_from(flags_for(command), current)

    def _complete_from(self, options: Iterable[str], word: str) -> Iterable[Completion]:
        word_lower = word.lower()
        for option in options:
            if option.startswith(word_lower):
                yield Completion(
                    option,
                    start_position=-len(word),
                    display=option,
                    display_meta=self._get_command_description(option),
                )

    def _complete_task_targets(self, word: str) -> Iterable[Completion]:
        """Fixed column keys, then lane titles from the open board."""
        yield from self._complete_from(list(FIXED_COLUMNS), word)
        yield from self._complete_lane_titles(word, custom_only=True)

    def _complete_item_ids(self, word: str, stories: bool) -> Iterable[Completion]:
        """Task (or story) ids of the open board, labelled with their title."""
        snapshot = self._snapshot()
        if snapshot is None:
            return
        items = snapshot.stories if stories else snapshot.tasks
        for item in items[:200]:
            id_str = str(item.id)
            if id_str.startswith(word):
                title = item.title if len(item.title) <= 40 else item.title[:37] + "..."
                yield Completion(
                    id_str,
                    start_position=-len(word),
                    display=id_str,
                    display_meta=f"{title} [{item.status}]",
                )

    def _complete_lane_titles(self, word: str, custom_only: bool = False) -> Iterable[Completion]:
        word_stripped = word.strip('"').strip("'").lower()
        for lane in self._lanes():
            if custom_only and lane.is_fixed:
                continue
            if lane.title.lower().startswith(word_stripped):
                yield Completion(
                    _quote(lane.title),
                    start_position=-len(word),
                    display=lane.title,
                    display_meta=lane.status_value,
                )

    def _complete_project_names(self, word: str) -> Iterable[Completion]:
        # Import here to avoid loading the service for command-name completion
        from ..core import service

        word_stripped = word.strip('"').strip("'").lower()
        try:
            projects = service.list_projects()
        except (LaneboardError, sqlite3.Error):
            return

        for project in projects:
            if project.name.lower().startswith(word_stripped):
                yield Completion(
                    _quote(project.name),
                    start_position=-len(word),
                    display=project.name,
                    display_meta=f"Project #{project.id}",
                )

    @staticmethod
    def _get_command_description(command: str) -> str:
        """Get description for a command (shown in autocomplete menu)."""
        descriptions = {
            "board": "Show the board",
            "lanes": "List lanes in board order",
            "mv": "Move a task to a lane",
            "smv": "Move a story",
            "lane": "Manage custom lanes",
            "project": "Manage projects",
            "use": "Open a project's board",
            "refresh": "Re-fetch the board now",
            "help": "Show available commands",
            "clear": "Clear the screen",
            "exit": "Exit REPL",
            "quit": "Exit REPL",
            "inprogress": "After In Progress",
            "qa": "After QA",
            "backlog": "Remove from sprint",
            "stories": "Sprint stories column",
        }
        return descriptions.get(command, "")


def create_completer(snapshot_provider: Optional[SnapshotProvider] = None) -> LaneboardCompleter:
    """
    Create and return a LaneboardCompleter instance.

    Usage:
        completer = create_completer(lambda: repl_context.controller.snapshot)
        session = PromptSession(completer=completer)
    """
    return LaneboardCompleter(snapshot_provider)

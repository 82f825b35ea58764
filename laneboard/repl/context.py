"""
FILE: laneboard/repl/context.py
PURPOSE: Persistent REPL session state: selected project, board controller, refresher
EXPORTS:
  - console (Rich console shared by handlers)
  - REPLContext (dataclass)
  - repl_context (module-level session instance)
DEPENDENCIES:
  - rich (console)
  - laneboard.core.gateway, dragdrop, refresh
NOTES:
  - Kept apart from repl/main.py so handlers can import it without cycles
  - Opening a project fetches a snapshot, builds a DragDropController and
    starts a SnapshotRefresher feeding it
  - Every refreshed snapshot goes through DragDropController.accept_snapshot
"""

from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console

from ..config import get_settings
from ..core.dragdrop import DragDropController
from ..core.exceptions import InvalidInputError
from ..core.gateway import LocalGateway
from ..core.models import Project
from ..core.refresh import SnapshotRefresher
from ..core.snapshot import BoardSnapshot


# Rich console for formatted output
console = Console()


@dataclass
class REPLContext:
    """
    State of one REPL session.

    Attributes:
        current_project: Project whose board is open (or None)
        sprint_id: Sprint shown (None = the project's active sprint)
        include_backlog: Whether backlog stories appear as rows
        controller: Move controller for the open board
        refresher: Keeps the controller's snapshot fresh
    """
    current_project: Optional[Project] = None
    sprint_id: Optional[int] = None
    include_backlog: bool = False
    controller: Optional[DragDropController] = None
    refresher: Optional[SnapshotRefresher] = None
    gateway: LocalGateway = field(default_factory=LocalGateway)

    def get_prompt(self) -> str:
        """
        Prompt like "laneboard> " or "laneboard:[Web App]> ".
        """
        if self.current_project is None:
            return "laneboard> "
        label = self.current_project.name
        if self.include_backlog:
            label += " | backlog"
        return f"laneboard:[{label}]> "

    async def _load(self) -> BoardSnapshot:
        return await self.gateway.fetch_snapshot(
            self.current_project.id, self.sprint_id, self.include_backlog
        )

    def _on_snapshot(self, snapshot: BoardSnapshot) -> None:
        if self.controller is not None:
            self.controller.accept_snapshot(snapshot)

    async def open_project(
        self,
        project: Project,
        sprint_id: Optional[int] = None,
        include_backlog: bool = False,
    ) -> BoardSnapshot:
        """
        Select a project and start refreshing its board.

        Raises:
            PersistenceError: If the first snapshot can't be fetched
        """
        await self.close()

        self.current_project = project
        self.sprint_id = sprint_id
        self.include_backlog = include_backlog

        snapshot = await self._load()
        self.controller = DragDropController(self.gateway, snapshot)
        self.refresher = SnapshotRefresher(
            self._load,
            interval=get_settings().refresh_interval,
            subscribers=[self._on_snapshot],
        )
        self.refresher.latest = snapshot
        self.refresher.start()
        return snapshot

    def require_board(self) -> DragDropController:
        """
        Controller of the open board.

        Raises:
            InvalidInputError: If no project is selected
        """
        if self.controller is None:
            raise InvalidInputError("No project selected. Use: use <project>")
        return self.controller

    async def refresh(self, reason: str = "explicit") -> Optional[BoardSnapshot]:
        """Fetch a snapshot now (no-op without a project)."""
        if self.refresher is None:
            return None
        return await self.refresher.refresh_now(reason)

    def notify_focus(self) -> None:
        """The prompt came back: schedule a background refresh."""
        if self.refresher is not None:
            self.refresher.notify_focus()

    async def close(self) -> None:
        """Stop the refresher of the current board, if any."""
        if self.refresher is not None:
            await self.refresher.stop()
        self.refresher = None
        self.controller = None


# Global REPL context (persists during session, resets on restart)
repl_context = REPLContext()

"""
FILE: laneboard/core/snapshot.py
PURPOSE: Immutable per-fetch view of a project's board data
EXPORTS:
  - BoardSnapshot (frozen dataclass)
  - load_snapshot(project_id, sprint_id, include_backlog) -> BoardSnapshot
DEPENDENCIES:
  - laneboard.core.repository (reads)
  - laneboard.core.registry (LaneRegistry)
  - laneboard.core.models
NOTES:
  - Each load produces a new snapshot with a higher version number
  - Nothing holds lane/task objects across refetches
"""

import itertools
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from . import repository
from .exceptions import ProjectNotFoundError, SprintNotFoundError
from .models import Story, Task
from .registry import LaneRegistry


_versions = itertools.count(1)


@dataclass(frozen=True)
class BoardSnapshot:
    """Lanes, stories and tasks of one project as fetched at one moment."""

    project_id: int
    sprint_id: Optional[int]
    registry: LaneRegistry
    stories: Tuple[Story, ...]
    tasks: Tuple[Task, ...]
    include_backlog: bool = False
    version: int = field(default_factory=lambda: next(_versions))
    fetched_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def lanes(self):
        return self.registry.lanes

    def find_task(self, task_id: int) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_story(self, story_id: int) -> Optional[Story]:
        return next((s for s in self.stories if s.id == story_id), None)


def load_snapshot(
    project_id: int,
    sprint_id: Optional[int] = None,
    include_backlog: bool = False,
) -> BoardSnapshot:
    """
    Read a fresh snapshot from the repository.

    Args:
        project_id: Project to load
        sprint_id: Sprint whose board is shown (None = active sprint, if any)
        include_backlog: Whether backlog stories appear on the board

    Raises:
        ProjectNotFoundError: If the project doesn't exist
        SprintNotFoundError: If sprint_id is given but doesn't exist
    """
    if repository.get_project(project_id) is None:
        raise ProjectNotFoundError(project_id)

    if sprint_id is None:
        active = repository.get_active_sprint(project_id)
        sprint_id = active.id if active else None
    elif repository.get_sprint(sprint_id) is None:
        raise SprintNotFoundError(sprint_id)

    registry = LaneRegistry.from_persisted(
        project_id, repository.list_lanes_by_project(project_id)
    )
    stories = tuple(repository.list_stories(project_id))
    tasks = tuple(repository.list_tasks_by_project(project_id))

    return BoardSnapshot(
        project_id=project_id,
        sprint_id=sprint_id,
        registry=registry,
        stories=stories,
        tasks=tasks,
        include_backlog=include_backlog,
    )

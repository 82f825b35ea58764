"""
FILE: laneboard/core/service.py
PURPOSE: Business logic layer for projects, sprints, stories, tasks and lanes
EXPORTS:
  - create_project(name) / list_projects() / find_project_or_raise(ref)
  - create_sprint(project_id, name, active) / list_sprints / activate_sprint
  - create_story(project_id, title, sprint_id, backlog) / list_stories
  - create_task(story_id, title) -> Task
  - get_registry(project_id) -> LaneRegistry
  - create_lane(project_id, title, after, ...) -> WorkflowLane
  - update_lane(project_id, lane_ref, ...) -> WorkflowLane
  - delete_lane(project_id, lane_ref) -> int (tasks left orphaned)
  - reorder_lanes(project_id, lane_refs) -> List[WorkflowLane]
  - resolve_lane(registry, ref) -> WorkflowLane
  - load_board(project_id, sprint_id, include_backlog) -> (BoardSnapshot, Board)
  - resolve_column_key(registry, ref) -> str
  - move_item(project_id, item_type, item_id, target, sprint_id) -> MoveResult
  - move_task(task_id, target) / move_story(story_id, target) -> MoveResult
DEPENDENCIES:
  - laneboard.core.repository (persistence)
  - laneboard.core.registry (lane validation and ordering)
  - laneboard.core.snapshot, projector, gateway, dragdrop
  - laneboard.core.exceptions
NOTES:
  - Lane titles are validated before any write is issued
  - New lanes are appended to the section chosen by the caller
  - Status changes always go through DragDropController
  - Returns domain objects, never dicts or raw SQL results
"""

import asyncio
import logging
import re
import sqlite3
from typing import List, Optional, Sequence, Tuple

from . import repository
from .constants import (
    COLUMN_BACKLOG,
    COLUMN_STORIES,
    CUSTOM_SECTIONS,
    FIXED_COLUMNS,
    ITEM_STORY,
    ITEM_TASK,
    SECTION_ALIASES,
    STORY_COLUMNS,
)
from .dragdrop import DragDropController, MoveResult
from .exceptions import (
    InvalidInputError,
    LaneNotFoundError,
    ProjectNotFoundError,
    SprintNotFoundError,
    StoryNotFoundError,
    TaskNotFoundError,
)
from .gateway import LocalGateway
from .mapper import column_for_lane
from .models import Project, Sprint, Story, Task, WorkflowLane
from .projector import Board, build_board
from .registry import LaneRegistry
from .snapshot import BoardSnapshot, load_snapshot


logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


# --- Projects ---


def create_project(name: str) -> Project:
    """
    Create a new project with validation.

    Raises:
        InvalidInputError: If name is empty or already taken
    """
    name = name.strip()
    if not name:
        raise InvalidInputError("Project name cannot be empty")

    try:
        return repository.create_project(name)
    except sqlite3.IntegrityError:
        raise InvalidInputError(f"Project '{name}' already exists")


def list_projects() -> List[Project]:
    return repository.list_projects()


def find_project_or_raise(ref: str) -> Project:
    """
    Find a project by numeric id or name (case-insensitive).

    Raises:
        InvalidInputError: If no project matches (lists available ones)
    """
    ref = str(ref).strip()
    project = None
    if ref.isdigit():
        project = repository.get_project(int(ref))
    if project is None:
        project = repository.get_project_by_name(ref)
    if project is None:
        available = ", ".join(p.name for p in list_projects()) or "none"
        raise InvalidInputError(
            f"Project '{ref}' not found. Available projects: {available}"
        )
    return project


# --- Sprints ---


def create_sprint(project_id: int, name: str, active: bool = False) -> Sprint:
    """
    Create a sprint; the project's first sprint is activated automatically.

    Raises:
        InvalidInputError: If name is empty
        ProjectNotFoundError: If project doesn't exist
    """
    name = name.strip()
    if not name:
        raise InvalidInputError("Sprint name cannot be empty")

    if repository.get_active_sprint(project_id) is None:
        active = True
    return repository.create_sprint(project_id, name, is_active=active)


def list_sprints(project_id: int) -> List[Sprint]:
    return repository.list_sprints(project_id)


def activate_sprint(sprint_id: int) -> Sprint:
    return repository.set_active_sprint(sprint_id)


# --- Stories and tasks ---


def create_story(
    project_id: int,
    title: str,
    sprint_id: Optional[int] = None,
    backlog: bool = False,
) -> Story:
    """
    Create a story in a sprint or in the backlog.

    Args:
        project_id: Owning project
        title: Story title (required)
        sprint_id: Target sprint; defaults to the active sprint
        backlog: Put the story in the backlog regardless of sprints

    Notes:
        - Without an active sprint the story goes to the backlog
        - Sprint stories start in the Stories column, backlog ones in backlog
    """
    title = title.strip()
    if not title:
        raise InvalidInputError("Story title cannot be empty")

    if backlog:
        sprint_id = None
    elif sprint_id is None:
        active = repository.get_active_sprint(project_id)
        sprint_id = active.id if active else None
    elif repository.get_sprint(sprint_id) is None:
        raise SprintNotFoundError(sprint_id)

    status = COLUMN_STORIES if sprint_id is not None else COLUMN_BACKLOG
    return repository.create_story(project_id, title, sprint_id=sprint_id, status=status)


def list_stories(project_id: int) -> List[Story]:
    return repository.list_stories(project_id)


def create_task(story_id: int, title: str) -> Task:
    """
    Create a task under a story. New tasks start in To Do.

    Raises:
        InvalidInputError: If title is empty
        StoryNotFoundError: If story doesn't exist
    """
    title = title.strip()
    if not title:
        raise InvalidInputError("Task title cannot be empty")
    return repository.create_task(story_id, title)


def list_tasks(project_id: int) -> List[Task]:
    return repository.list_tasks_by_project(project_id)


# --- Lanes ---


def get_registry(project_id: int) -> LaneRegistry:
    """
    Current lane registry for a project.

    Raises:
        ProjectNotFoundError: If project doesn't exist
    """
    if repository.get_project(project_id) is None:
        raise ProjectNotFoundError(project_id)
    return LaneRegistry.from_persisted(
        project_id, repository.list_lanes_by_project(project_id)
    )


def resolve_section(after: str) -> str:
    """Accept 'inprogress'/'qa' aliases or a section name."""
    section = SECTION_ALIASES.get(after.strip().lower(), after)
    if section not in CUSTOM_SECTIONS:
        raise InvalidInputError(
            f"Invalid position '{after}'. Lanes can be added after: inprogress, qa"
        )
    return section


def resolve_lane(registry: LaneRegistry, ref: str) -> WorkflowLane:
    """
    Find a lane by id, status token or title (case-insensitive).

    Raises:
        LaneNotFoundError: If nothing matches
    """
    lane = (
        registry.get(ref)
        or registry.find_by_status(ref)
        or registry.find_by_title(ref)
    )
    if lane is None:
        raise LaneNotFoundError(ref)
    return lane


def _normalize_color(color: Optional[str]) -> Optional[str]:
    if color is None:
        return None
    match = _HEX_COLOR.match(color.strip())
    if not match:
        raise InvalidInputError(f"Invalid colour '{color}'. Use six hex digits, e.g. #3B82F6")
    return "#" + match.group(1).upper()


def _check_wip_limit(wip_limit: Optional[int]) -> None:
    if wip_limit is not None and wip_limit <= 0:
        raise InvalidInputError("WIP limit must be a positive integer")


def create_lane(
    project_id: int,
    title: str,
    after: str,
    color: Optional[str] = None,
    objective: Optional[str] = None,
    wip_limit: Optional[int] = None,
) -> WorkflowLane:
    """
    Create a custom lane after In Progress or after QA.

    Args:
        project_id: Owning project
        title: Lane title; must be unique among custom lanes (case-insensitive)
        after: 'inprogress' or 'qa' (or a section name)
        color: Six hex digits, defaults to the configured lane colour
        objective: Optional description
        wip_limit: Enables the WIP limit when given

    Raises:
        EmptyTitleError / DuplicateLaneTitleError: Before anything is written
        InvalidInputError: Bad section, colour or WIP limit
    """
    registry = get_registry(project_id)
    try:
        clean_title = registry.validate_new_lane(title)
    except InvalidInputError as e:
        logger.warning("Rejected new lane for project %s: %s", project_id, e)
        raise

    section = resolve_section(after)
    _check_wip_limit(wip_limit)
    order = registry.next_order_for(section)

    lane = repository.create_lane(
        project_id=project_id,
        title=clean_title,
        display_order=order,
        color=_normalize_color(color),
        objective=objective.strip() if objective and objective.strip() else None,
        wip_limit_enabled=wip_limit is not None,
        wip_limit=wip_limit,
    )
    logger.info("Created lane %s (%s) at order %s", lane.title, lane.status_value, order)
    return lane


def update_lane(
    project_id: int,
    lane_ref: str,
    title: Optional[str] = None,
    color: Optional[str] = None,
    objective: Optional[str] = None,
    wip_limit: Optional[int] = None,
    clear_wip: bool = False,
) -> WorkflowLane:
    """
    Edit a custom lane's title, colour, objective or WIP settings.

    Raises:
        LaneNotFoundError: If the lane doesn't exist or is a built-in stage
        DuplicateLaneTitleError: If the new title clashes with another lane
    """
    registry = get_registry(project_id)
    lane = resolve_lane(registry, lane_ref)
    if repository.get_lane(lane.id) is None:
        raise LaneNotFoundError(lane_ref)

    changes = {}
    if title is not None:
        changes["title"] = registry.validate_new_lane(title, exclude_lane_id=lane.id)
    if color is not None:
        changes["color"] = _normalize_color(color)
    if objective is not None:
        changes["objective"] = objective.strip() or None
    if clear_wip:
        changes["wip_limit_enabled"] = False
        changes["wip_limit"] = None
    elif wip_limit is not None:
        _check_wip_limit(wip_limit)
        changes["wip_limit_enabled"] = True
        changes["wip_limit"] = wip_limit

    return repository.update_lane(lane.id, **changes)


def delete_lane(project_id: int, lane_ref: str) -> int:
    """
    Delete a custom lane.

    Returns:
        Number of tasks still carrying the lane's status (now orphaned)

    Notes:
        - Tasks are not migrated; they show up as orphaned on the board
    """
    registry = get_registry(project_id)
    lane = resolve_lane(registry, lane_ref)
    repository.delete_lane(lane.id)

    orphaned = sum(
        1 for t in repository.list_tasks_by_project(project_id)
        if t.status == lane.status_value
    )
    logger.info("Deleted lane %s; %d task(s) orphaned", lane.title, orphaned)
    return orphaned


def reorder_lanes(project_id: int, lane_refs: Sequence[str]) -> List[WorkflowLane]:
    """
    Reorder custom lanes; lane_refs must name every custom lane exactly once.

    Raises:
        InvalidReorderError: If lane_refs is not a permutation of custom lanes
    """
    registry = get_registry(project_id)
    ids = []
    for ref in lane_refs:
        try:
            ids.append(resolve_lane(registry, ref).id)
        except LaneNotFoundError:
            ids.append(ref)

    repository.reorder_lanes(registry.reorder(ids))
    logger.info("Reordered %d lane(s) in project %s", len(ids), project_id)
    return get_registry(project_id).list_lanes()


# --- Board ---


def load_board(
    project_id: int,
    sprint_id: Optional[int] = None,
    include_backlog: bool = False,
) -> Tuple[BoardSnapshot, Board]:
    """Fetch a snapshot and project it into a board."""
    snapshot = load_snapshot(project_id, sprint_id, include_backlog)
    return snapshot, build_board(snapshot)


def resolve_column_key(registry: LaneRegistry, ref: str) -> str:
    """
    Column key for a user-typed target: a column key, lane title or status.

    Unknown references are returned lowercased so the move is rejected
    by the drop rules rather than guessed.
    """
    ref = ref.strip()
    lowered = ref.lower()
    if lowered in FIXED_COLUMNS or lowered in STORY_COLUMNS:
        return lowered

    lane = registry.find_by_status(ref) or registry.find_by_title(ref)
    if lane is not None:
        return column_for_lane(lane).key
    return lowered


def move_item(
    project_id: int,
    item_type: str,
    item_id: int,
    target: str,
    sprint_id: Optional[int] = None,
) -> MoveResult:
    """
    One-shot move of a task or story to a column (for CLI use).

    Args:
        target: Column key, lane title or lane status value

    Raises:
        InvalidMoveError, TaskNotFoundError, StoryNotFoundError, PersistenceError
    """
    snapshot = load_snapshot(project_id, sprint_id, include_backlog=True)
    key = resolve_column_key(snapshot.registry, target)
    controller = DragDropController(LocalGateway(), snapshot)
    return asyncio.run(controller.apply_move(item_id, item_type, key))


def move_task(task_id: int, target: str) -> MoveResult:
    """
    Move a task to a fixed column or custom lane.

    Raises:
        TaskNotFoundError: If task doesn't exist
    """
    task = repository.get_task(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    story = repository.get_story(task.story_id)
    return move_item(story.project_id, ITEM_TASK, task_id, target)


def move_story(story_id: int, target: str) -> MoveResult:
    """
    Move a story between backlog, stories and the fixed stage columns.

    Raises:
        StoryNotFoundError: If story doesn't exist
    """
    story = repository.get_story(story_id)
    if story is None:
        raise StoryNotFoundError(story_id)
    return move_item(story.project_id, ITEM_STORY, story_id, target)

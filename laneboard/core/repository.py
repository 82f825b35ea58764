"""
FILE: laneboard/core/repository.py
PURPOSE: Database operations and SQLite connection management
EXPORTS:
  - get_connection() -> Connection
  - init_database() -> None
  - create_project(name) / get_project / get_project_by_name / list_projects
  - create_sprint(project_id, name, is_active) / get_sprint / list_sprints
  - get_active_sprint(project_id) / set_active_sprint(sprint_id)
  - create_story(project_id, title, sprint_id, status) / get_story / list_stories
  - update_story_status(story_id, status, sprint_id) -> Story
  - create_task(story_id, title, status) / get_task / list_tasks_by_project
  - update_task_status(task_id, status) -> Task
  - create_lane(...) / get_lane / list_lanes_by_project
  - update_lane(lane_id, **changes) / delete_lane(lane_id)
  - reorder_lanes(lane_ids) -> None
DEPENDENCIES:
  - sqlite3 (stdlib)
  - pathlib, datetime, uuid (stdlib)
  - laneboard.config (data directory)
  - laneboard.core.models
  - laneboard.core.registry (section ordering)
  - laneboard.core.exceptions
NOTES:
  - Plays the persistence collaborator: one function per lane endpoint
  - Database stored at <data_dir>/laneboard.db (~/.laneboard by default)
  - Auto-creates directory and initializes schema on first run
  - Returns domain objects, never raw dicts
  - Deleting a lane does not touch tasks that still carry its status
"""

import sqlite3
import uuid
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..config import get_settings
from .constants import (
    CUSTOM_STATUS_PREFIX,
    DEFAULT_STORY_STATUS,
    LANE_ID_PREFIX,
    SECTION_AFTER_QA,
    SECTION_FIXED,
    STATUS_TO_DO,
)
from .models import Project, Sprint, Story, Task, WorkflowLane
from .registry import classify_lane, next_order_for, spread_orders
from .exceptions import (
    InvalidInputError,
    LaneNotFoundError,
    ProjectNotFoundError,
    SprintNotFoundError,
    StoryNotFoundError,
    TaskNotFoundError,
)


# Database file location (overridable with LANEBOARD_HOME)
DB_DIR = get_settings().data_path
DB_PATH = DB_DIR / get_settings().db_name

# Schema file location (relative to this file)
SCHEMA_PATH = Path(__file__).parent.parent / "db" / "schema.sql"

# Lane fields a PUT may change; status_value and project_id are fixed at creation
MUTABLE_LANE_FIELDS = ("title", "color", "objective", "wip_limit_enabled", "wip_limit")


def get_connection() -> sqlite3.Connection:
    """
    Get SQLite connection to the Laneboard database.

    Creates the data directory if it doesn't exist.
    Enables row_factory for dict-like row access.
    Enables foreign key constraints.
    Initializes database schema on first connection.
    """
    DB_DIR.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row

    # Required for ON DELETE CASCADE/SET NULL
    conn.execute("PRAGMA foreign_keys = ON")

    init_database(conn)

    return conn


def init_database(conn: sqlite3.Connection) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times (uses CREATE TABLE IF NOT EXISTS).
    """
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='workflow_lanes'"
    )
    tables_exist = cursor.fetchone() is not None

    if not tables_exist:
        with open(SCHEMA_PATH, "r") as f:
            schema_sql = f.read()

        conn.executescript(schema_sql)
        conn.commit()


def _now() -> str:
    return datetime.now().isoformat()


# --- Project Operations ---


def create_project(name: str) -> Project:
    """
    Create a new project.

    Raises:
        sqlite3.IntegrityError: If project name already exists
    """
    conn = get_connection()
    cursor = conn.execute(
        "INSERT INTO projects (name, created_at) VALUES (?, ?)",
        (name, _now()),
    )
    conn.commit()

    project = get_project(cursor.lastrowid)
    if not project:
        raise ProjectNotFoundError(cursor.lastrowid)
    return project


def get_project(project_id: int) -> Optional[Project]:
    """Fetch single project by ID, or None."""
    conn = get_connection()
    row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
    return Project.from_row(row) if row else None


def get_project_by_name(name: str) -> Optional[Project]:
    """Fetch project by name (case-insensitive), or None."""
    conn = get_connection()
    row = conn.execute(
        "SELECT * FROM projects WHERE lower(name) = lower(?)", (name,)
    ).fetchone()
    return Project.from_row(row) if row else None


def list_projects() -> List[Project]:
    """List all projects, oldest first."""
    conn = get_connection()
    rows = conn.execute("SELECT * FROM projects ORDER BY created_at, id").fetchall()
    return [Project.from_row(row) for row in rows]


# --- Sprint Operations ---


def create_sprint(project_id: int, name: str, is_active: bool = False) -> Sprint:
    """
    Create a sprint. Activating it deactivates the project's other sprints.

    Raises:
        ProjectNotFoundError: If project doesn't exist
    """
    if not get_project(project_id):
        raise ProjectNotFoundError(project_id)

    conn = get_connection()
    if is_active:
        conn.execute("UPDATE sprints SET is_active = 0 WHERE project_id = ?", (project_id,))
    cursor = conn.execute(
        "INSERT INTO sprints (project_id, name, is_active, created_at) VALUES (?, ?, ?, ?)",
        (project_id, name, int(is_active), _now()),
    )
    conn.commit()

    sprint = get_sprint(cursor.lastrowid)
    if not sprint:
        raise SprintNotFoundError(cursor.lastrowid)
    return sprint


def get_sprint(sprint_id: int) -> Optional[Sprint]:
    """Fetch single sprint by ID, or None."""
    conn = get_connection()
    row = conn.execute("SELECT * FROM sprints WHERE id = ?", (sprint_id,)).fetchone()
    return Sprint.from_row(row) if row else None


def list_sprints(project_id: int) -> List[Sprint]:
    """List a project's sprints, oldest first."""
    conn = get_connection()
    rows = conn.execute(
        "SELECT * FROM sprints WHERE project_id = ? ORDER BY created_at, id",
        (project_id,),
    ).fetchall()
    return [Sprint.from_row(row) for row in rows]


def get_active_sprint(project_id: int) -> Optional[Sprint]:
    """The project's active sprint, or None."""
    conn = get_connection()
    row = conn.execute(
        "SELECT * FROM sprints WHERE project_id = ? AND is_active = 1 ORDER BY id DESC",
        (project_id,),
    ).fetchone()
    return Sprint.from_row(row) if row else None


def set_active_sprint(sprint_id: int) -> Sprint:
    """
    Make a sprint the single active sprint of its project.

    Raises:
        SprintNotFoundError: If sprint doesn't exist
    """
    sprint = get_sprint(sprint_id)
    if not sprint:
        raise SprintNotFoundError(sprint_id)

    conn = get_connection()
    conn.execute("UPDATE sprints SET is_active = 0 WHERE project_id = ?", (sprint.project_id,))
    conn.execute("UPDATE sprints SET is_active = 1 WHERE id = ?", (sprint_id,))
    conn.commit()

    return get_sprint(sprint_id)


# --- Story Operations ---


def create_story(
    project_id: int,
    title: str,
    sprint_id: Optional[int] = None,
    status: str = DEFAULT_STORY_STATUS,
) -> Story:
    """
    Create a story in a sprint, or in the backlog when sprint_id is None.

    Raises:
        ProjectNotFoundError: If project doesn't exist
        SprintNotFoundError: If sprint_id is given but doesn't exist
    """
    if not get_project(project_id):
        raise ProjectNotFoundError(project_id)
    if sprint_id is not None and not get_sprint(sprint_id):
        raise SprintNotFoundError(sprint_id)

    conn = get_connection()
    now = _now()
    cursor = conn.execute(
        """
        INSERT INTO stories (project_id, sprint_id, title, status, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (project_id, sprint_id, title, status, now, now),
    )
    conn.commit()

    story = get_story(cursor.lastrowid)
    if not story:
        raise StoryNotFoundError(cursor.lastrowid)
    return story


def get_story(story_id: int) -> Optional[Story]:
    """Fetch single story by ID, or None."""
    conn = get_connection()
    row = conn.execute("SELECT * FROM stories WHERE id = ?", (story_id,)).fetchone()
    return Story.from_row(row) if row else None


def list_stories(project_id: int) -> List[Story]:
    """List a project's stories in creation order."""
    conn = get_connection()
    rows = conn.execute(
        "SELECT * FROM stories WHERE project_id = ? ORDER BY created_at, id",
        (project_id,),
    ).fetchall()
    return [Story.from_row(row) for row in rows]


def update_story_status(story_id: int, status: str, sprint_id: Optional[int]) -> Story:
    """
    Set a story's status and sprint in one write.

    Raises:
        StoryNotFoundError: If story doesn't exist
    """
    if not get_story(story_id):
        raise StoryNotFoundError(story_id)

    conn = get_connection()
    conn.execute(
        "UPDATE stories SET status = ?, sprint_id = ?, updated_at = ? WHERE id = ?",
        (status, sprint_id, _now(), story_id),
    )
    conn.commit()

    return get_story(story_id)


# --- Task Operations ---


def create_task(story_id: int, title: str, status: str = STATUS_TO_DO) -> Task:
    """
    Create a task under a story.

    Note:
        task_number is assigned per story as max(existing) + 1.

    Raises:
        StoryNotFoundError: If story doesn't exist
    """
    if not get_story(story_id):
        raise StoryNotFoundError(story_id)

    conn = get_connection()
    row = conn.execute(
        "SELECT COALESCE(MAX(task_number), 0) AS top FROM tasks WHERE story_id = ?",
        (story_id,),
    ).fetchone()
    now = _now()
    cursor = conn.execute(
        """
        INSERT INTO tasks (story_id, title, status, task_number, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (story_id, title, status, row["top"] + 1, now, now),
    )
    conn.commit()

    task = get_task(cursor.lastrowid)
    if not task:
        raise TaskNotFoundError(cursor.lastrowid)
    return task


def get_task(task_id: int) -> Optional[Task]:
    """Fetch single task by ID, or None."""
    conn = get_connection()
    row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
    return Task.from_row(row) if row else None


def list_tasks_by_project(project_id: int) -> List[Task]:
    """List every task whose story belongs to the project."""
    conn = get_connection()
    rows = conn.execute(
        """
        SELECT tasks.* FROM tasks
        JOIN stories ON stories.id = tasks.story_id
        WHERE stories.project_id = ?
        ORDER BY tasks.id
        """,
        (project_id,),
    ).fetchall()
    return [Task.from_row(row) for row in rows]


def update_task_status(task_id: int, status: str) -> Task:
    """
    Persist a task's status (fixed code or custom lane token, stored verbatim).

    Raises:
        TaskNotFoundError: If task doesn't exist
    """
    if not get_task(task_id):
        raise TaskNotFoundError(task_id)

    conn = get_connection()
    conn.execute(
        "UPDATE tasks SET status = ?, updated_at = ? WHERE id = ?",
        (status, _now(), task_id),
    )
    conn.commit()

    return get_task(task_id)


# --- Workflow Lane Operations ---


def create_lane(
    project_id: int,
    title: str,
    status_value: Optional[str] = None,
    display_order: Optional[float] = None,
    color: Optional[str] = None,
    objective: Optional[str] = None,
    wip_limit_enabled: bool = False,
    wip_limit: Optional[int] = None,
    lane_id: Optional[str] = None,
) -> WorkflowLane:
    """
    Create a workflow lane.

    Args:
        project_id: Owning project
        title: Lane title (already validated by the caller)
        status_value: Status token; generated as custom_lane_<hex> when absent
        display_order: Position; appended before Done when absent or 0
        color: Hex colour; defaults to #3B82F6
        objective: Optional description
        wip_limit_enabled: Whether the WIP limit is checked
        wip_limit: Positive limit, kept only when enabled
        lane_id: Opaque id; generated as WFLN<hex> when absent

    Raises:
        ProjectNotFoundError: If project doesn't exist
        sqlite3.IntegrityError: If the status value is already used in the project
    """
    if not get_project(project_id):
        raise ProjectNotFoundError(project_id)

    lane_id = lane_id or f"{LANE_ID_PREFIX}{uuid.uuid4().hex}"
    status_value = status_value or f"{CUSTOM_STATUS_PREFIX}{uuid.uuid4().hex[:8]}"
    if not display_order:
        display_order = next_order_for(SECTION_AFTER_QA, list_lanes_by_project(project_id))

    conn = get_connection()
    now = _now()
    conn.execute(
        """
        INSERT INTO workflow_lanes (
            id, project_id, title, color, objective, wip_limit_enabled, wip_limit,
            display_order, status_value, created_at, updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            lane_id,
            project_id,
            title,
            color or get_settings().default_lane_color,
            objective,
            int(bool(wip_limit_enabled)),
            wip_limit if wip_limit_enabled else None,
            display_order,
            status_value,
            now,
            now,
        ),
    )
    conn.commit()

    lane = get_lane(lane_id)
    if not lane:
        raise LaneNotFoundError(lane_id)
    return lane


def get_lane(lane_id: str) -> Optional[WorkflowLane]:
    """Fetch single lane by ID, or None."""
    conn = get_connection()
    row = conn.execute("SELECT * FROM workflow_lanes WHERE id = ?", (lane_id,)).fetchone()
    return WorkflowLane.from_row(row) if row else None


def list_lanes_by_project(project_id: int) -> List[WorkflowLane]:
    """List a project's persisted lanes by display order."""
    conn = get_connection()
    rows = conn.execute(
        "SELECT * FROM workflow_lanes WHERE project_id = ? ORDER BY display_order, id",
        (project_id,),
    ).fetchall()
    return [WorkflowLane.from_row(row) for row in rows]


def update_lane(lane_id: str, **changes) -> WorkflowLane:
    """
    Apply a partial update to a lane.

    Raises:
        LaneNotFoundError: If lane doesn't exist
        InvalidInputError: If an immutable or unknown field is given
    """
    unknown = [k for k in changes if k not in MUTABLE_LANE_FIELDS]
    if unknown:
        raise InvalidInputError(f"Lane fields cannot be updated: {', '.join(unknown)}")

    lane = get_lane(lane_id)
    if not lane:
        raise LaneNotFoundError(lane_id)

    if not changes:
        return lane

    if "wip_limit_enabled" in changes:
        changes["wip_limit_enabled"] = int(bool(changes["wip_limit_enabled"]))

    assignments = ", ".join(f"{name} = ?" for name in changes)
    conn = get_connection()
    conn.execute(
        f"UPDATE workflow_lanes SET {assignments}, updated_at = ? WHERE id = ?",
        (*changes.values(), _now(), lane_id),
    )
    conn.commit()

    return get_lane(lane_id)


def delete_lane(lane_id: str) -> None:
    """
    Delete lane by ID.

    Raises:
        LaneNotFoundError: If lane doesn't exist
    """
    if not get_lane(lane_id):
        raise LaneNotFoundError(lane_id)

    conn = get_connection()
    conn.execute("DELETE FROM workflow_lanes WHERE id = ?", (lane_id,))
    conn.commit()


def reorder_lanes(lane_ids: Sequence[str]) -> None:
    """
    Reassign display orders from array position, section by section.

    Each lane keeps its section; within a section lanes get consecutive
    orders following their position in lane_ids.

    Raises:
        LaneNotFoundError: If any lane doesn't exist
    """
    by_section: Dict[str, List[str]] = {}
    for lane_id in lane_ids:
        lane = get_lane(lane_id)
        if not lane:
            raise LaneNotFoundError(lane_id)
        section = classify_lane(lane)
        if section == SECTION_FIXED:
            continue
        by_section.setdefault(section, []).append(lane_id)

    conn = get_connection()
    now = _now()
    for section, ids in by_section.items():
        for lane_id, order in zip(ids, spread_orders(section, len(ids))):
            conn.execute(
                "UPDATE workflow_lanes SET display_order = ?, updated_at = ? WHERE id = ?",
                (order, now, lane_id),
            )
    conn.commit()

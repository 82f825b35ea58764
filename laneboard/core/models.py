"""
FILE: laneboard/core/models.py
PURPOSE: Domain models for projects, sprints, stories, tasks, lanes and board columns
EXPORTS:
  - Project, Sprint, Story, Task (dataclasses)
  - WorkflowLane (dataclass)
  - FixedStage (enum of fixed task stages)
  - FixedColumn, CustomColumn, OrphanedColumn (column identity variants)
  - BoardColumn (union of the column variants)
DEPENDENCIES:
  - dataclasses (stdlib)
  - enum (stdlib)
  - json (stdlib)
  - typing (stdlib)
  - laneboard.core.constants
NOTES:
  - All persisted models have from_row() for SQLite row conversion
  - All persisted models have to_json() for serialization
  - Models are frozen: a refetch produces new objects, nothing is patched in place
  - Timestamps stored as ISO-8601 strings
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Union
import json

from .constants import (
    STATUS_TO_DO,
    STATUS_IN_PROGRESS,
    STATUS_QA_REVIEW,
    STATUS_DONE,
    COLUMN_TODO,
    COLUMN_IN_PROGRESS,
    COLUMN_QA,
    COLUMN_DONE,
    ORDER_TODO,
    ORDER_IN_PROGRESS,
    ORDER_QA,
    ORDER_DONE,
    FIXED_STATUSES,
    DEFAULT_STORY_STATUS,
)


Order = Union[int, float]


def normalize_order(value) -> Order:
    """Return integral orders as int so 21.0 and 21 read the same."""
    if value is None:
        return 0
    value = float(value)
    return int(value) if value.is_integer() else value


@dataclass(frozen=True)
class Project:
    """A project owning sprints, stories and workflow lanes."""

    id: int
    name: str
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Project":
        """Convert SQLite row to Project object."""
        return cls(
            id=row["id"],
            name=row["name"],
            created_at=row["created_at"],
        )

    def to_json(self) -> str:
        """Serialize project to JSON string."""
        return json.dumps(asdict(self), indent=2)


@dataclass(frozen=True)
class Sprint:
    """A time-boxed iteration inside a project."""

    id: int
    project_id: int
    name: str
    is_active: bool = False
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Sprint":
        """Convert SQLite row to Sprint object."""
        return cls(
            id=row["id"],
            project_id=row["project_id"],
            name=row["name"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
        )

    def to_json(self) -> str:
        """Serialize sprint to JSON string."""
        return json.dumps(asdict(self), indent=2)


@dataclass(frozen=True)
class Story:
    """A user story; sprint_id of None means the story sits in the backlog."""

    id: int
    project_id: int
    title: str
    status: str = DEFAULT_STORY_STATUS
    sprint_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def in_backlog(self) -> bool:
        return self.sprint_id is None

    @classmethod
    def from_row(cls, row) -> "Story":
        """Convert SQLite row to Story object."""
        return cls(
            id=row["id"],
            project_id=row["project_id"],
            title=row["title"],
            status=row["status"],
            sprint_id=row["sprint_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_json(self) -> str:
        """Serialize story to JSON string."""
        return json.dumps(asdict(self), indent=2)


@dataclass(frozen=True)
class Task:
    """A task under a story; its status alone decides the board column."""

    id: int
    story_id: int
    title: str
    status: str = STATUS_TO_DO
    task_number: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Task":
        """Convert SQLite row to Task object."""
        return cls(
            id=row["id"],
            story_id=row["story_id"],
            title=row["title"],
            status=row["status"],
            task_number=row["task_number"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_json(self) -> str:
        """Serialize task to JSON string."""
        return json.dumps(asdict(self), indent=2)


@dataclass(frozen=True)
class WorkflowLane:
    """A pipeline stage on the board, either a fixed stage or user-defined."""

    id: str
    project_id: int
    title: str
    status_value: str
    display_order: Order
    color: str = "#3B82F6"
    objective: Optional[str] = None
    wip_limit_enabled: bool = False
    wip_limit: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_fixed(self) -> bool:
        return self.status_value in FIXED_STATUSES

    def tint(self, strength: float = 0.85) -> str:
        """Blend the lane colour towards white, for column backgrounds."""
        raw = self.color.lstrip("#")
        if len(raw) != 6:
            return "#FFFFFF"
        try:
            channels = [int(raw[i:i + 2], 16) for i in (0, 2, 4)]
        except ValueError:
            return "#FFFFFF"
        mixed = [round(c + (255 - c) * strength) for c in channels]
        return "#" + "".join(f"{c:02X}" for c in mixed)

    @classmethod
    def from_row(cls, row) -> "WorkflowLane":
        """Convert SQLite row to WorkflowLane object."""
        return cls(
            id=row["id"],
            project_id=row["project_id"],
            title=row["title"],
            status_value=row["status_value"],
            display_order=normalize_order(row["display_order"]),
            color=row["color"],
            objective=row["objective"],
            wip_limit_enabled=bool(row["wip_limit_enabled"]),
            wip_limit=row["wip_limit"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_json(self) -> str:
        """Serialize lane to JSON string."""
        return json.dumps(asdict(self), indent=2)


# --- Column identity ---


class FixedStage(Enum):
    """The four fixed task stages: (column key, status code, title, anchor)."""

    TODO = (COLUMN_TODO, STATUS_TO_DO, "To Do", ORDER_TODO)
    IN_PROGRESS = (COLUMN_IN_PROGRESS, STATUS_IN_PROGRESS, "In Progress", ORDER_IN_PROGRESS)
    QA = (COLUMN_QA, STATUS_QA_REVIEW, "QA", ORDER_QA)
    DONE = (COLUMN_DONE, STATUS_DONE, "Done", ORDER_DONE)

    @property
    def column_key(self) -> str:
        return self.value[0]

    @property
    def status(self) -> str:
        return self.value[1]

    @property
    def title(self) -> str:
        return self.value[2]

    @property
    def anchor(self) -> int:
        return self.value[3]

    @classmethod
    def from_column_key(cls, key: str) -> Optional["FixedStage"]:
        return next((s for s in cls if s.column_key == key), None)

    @classmethod
    def from_status(cls, status: str) -> Optional["FixedStage"]:
        return next((s for s in cls if s.status == status), None)


@dataclass(frozen=True)
class FixedColumn:
    """Column of one of the fixed stages."""

    stage: FixedStage

    @property
    def key(self) -> str:
        return self.stage.column_key

    @property
    def status_value(self) -> str:
        return self.stage.status


@dataclass(frozen=True)
class CustomColumn:
    """Column of a user-defined lane; its key is the lane's status token."""

    lane_id: str
    status_value: str

    @property
    def key(self) -> str:
        return self.status_value


@dataclass(frozen=True)
class OrphanedColumn:
    """A custom status whose lane no longer exists in the snapshot."""

    status_value: str

    @property
    def key(self) -> str:
        return self.status_value


BoardColumn = Union[FixedColumn, CustomColumn, OrphanedColumn]

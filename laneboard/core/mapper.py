"""
FILE: laneboard/core/mapper.py
PURPOSE: Translate between board columns and persisted status values
EXPORTS:
  - column_for_lane(lane) -> BoardColumn
  - parse_column(key, lanes) -> BoardColumn
  - column_to_status(column, lanes) -> str
  - status_to_column(status, lanes) -> BoardColumn
  - is_task_column(key, lanes) -> bool
DEPENDENCIES:
  - laneboard.core.models (WorkflowLane, FixedStage, column variants)
  - laneboard.core.constants (status codes, custom prefix)
NOTES:
  - Every function is total: unknown input falls back to To Do, never raises
  - A custom lane's column key is its status token, so the mapping is a bijection
  - Custom tokens with no lane come back as OrphanedColumn for the caller to render
"""

from typing import Iterable, Optional, Union

from .constants import CUSTOM_STATUS_PREFIX, STATUS_TO_DO
from .models import (
    BoardColumn,
    CustomColumn,
    FixedColumn,
    FixedStage,
    OrphanedColumn,
    WorkflowLane,
)


ColumnLike = Union[BoardColumn, str]

FALLBACK_COLUMN = FixedColumn(FixedStage.TODO)


def column_for_lane(lane: WorkflowLane) -> BoardColumn:
    """Column identity of a lane."""
    stage = FixedStage.from_status(lane.status_value)
    if stage is not None:
        return FixedColumn(stage)
    return CustomColumn(lane_id=lane.id, status_value=lane.status_value)


def _key(column: ColumnLike) -> str:
    return column if isinstance(column, str) else column.key


def _custom_lane_for_key(key: str, lanes: Iterable[WorkflowLane]) -> Optional[WorkflowLane]:
    return next(
        (lane for lane in lanes if not lane.is_fixed and lane.status_value == key),
        None,
    )


def parse_column(key: str, lanes: Iterable[WorkflowLane]) -> BoardColumn:
    """
    Resolve a column key typed by a user or sent by a drop target.

    Fixed keys and custom lane keys resolve exactly; unknown custom tokens
    become OrphanedColumn; anything else falls back to To Do.
    """
    lane = _custom_lane_for_key(key, lanes)
    if lane is not None:
        return column_for_lane(lane)

    stage = FixedStage.from_column_key(key)
    if stage is not None:
        return FixedColumn(stage)

    if key.startswith(CUSTOM_STATUS_PREFIX):
        return OrphanedColumn(key)

    return FALLBACK_COLUMN


def column_to_status(column: ColumnLike, lanes: Iterable[WorkflowLane]) -> str:
    """
    Status value to persist when an item lands in `column`.

    Args:
        column: A column variant or a column key string
        lanes: Lanes of the current snapshot

    Returns:
        The custom lane's status token when the key matches a custom lane,
        otherwise the fixed status for the key, defaulting to TO_DO
    """
    key = _key(column)

    lane = _custom_lane_for_key(key, lanes)
    if lane is not None:
        return lane.status_value

    stage = FixedStage.from_column_key(key)
    return stage.status if stage is not None else STATUS_TO_DO


def status_to_column(status: Optional[str], lanes: Iterable[WorkflowLane]) -> BoardColumn:
    """
    Column a persisted status belongs to.

    Args:
        status: Raw status of a task
        lanes: Lanes of the current snapshot

    Returns:
        The matching lane's column; OrphanedColumn for a custom token with no
        lane; otherwise the fixed column for the status, defaulting to To Do
    """
    if not status:
        return FALLBACK_COLUMN

    lane = next((l for l in lanes if l.status_value == status), None)
    if lane is not None:
        return column_for_lane(lane)

    if status.startswith(CUSTOM_STATUS_PREFIX):
        return OrphanedColumn(status)

    stage = FixedStage.from_status(status)
    return FixedColumn(stage) if stage is not None else FALLBACK_COLUMN


def is_task_column(column: ColumnLike, lanes: Iterable[WorkflowLane]) -> bool:
    """True when tasks may be placed in the column (fixed or known custom)."""
    key = _key(column)
    if FixedStage.from_column_key(key) is not None:
        return True
    return _custom_lane_for_key(key, lanes) is not None

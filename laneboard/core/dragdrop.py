"""
FILE: laneboard/core/dragdrop.py
PURPOSE: Validate and commit drag-and-drop (or programmatic) status moves
EXPORTS:
  - DragState (enum)
  - MoveResult (frozen dataclass)
  - can_drop(item_type, target_column, lanes) -> bool
  - DragDropController
DEPENDENCIES:
  - asyncio-compatible gateway (update_task_status, update_story_status)
  - laneboard.core.mapper (column_to_status, is_task_column)
  - laneboard.core.projector (build_board)
  - laneboard.core.snapshot (BoardSnapshot)
  - laneboard.core.exceptions
NOTES:
  - States: IDLE -> DRAGGING -> DROPPED -> COMMITTING -> COMMITTED | FAILED
  - drop() requires a prior begin_drag(); programmatic moves call apply_move() directly
  - An invalid drop or an unknown item goes back to IDLE with no state change
  - One in-flight move per item; a second one is rejected, not queued
  - A newer snapshot always wins over optimistic statuses
  - No rollback state is kept: after a failure the caller re-fetches
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Optional, Set, Tuple, Union

from .constants import (
    COLUMN_BACKLOG,
    COLUMN_STORIES,
    ITEM_STORY,
    ITEM_TASK,
    ITEM_TYPES,
    STORY_COLUMNS,
)
from .exceptions import (
    InvalidInputError,
    InvalidMoveError,
    MoveAlreadyInProgressError,
    PersistenceError,
    StoryNotFoundError,
    TaskNotFoundError,
)
from .mapper import column_to_status, is_task_column
from .models import BoardColumn, WorkflowLane
from .projector import Board, build_board
from .snapshot import BoardSnapshot


logger = logging.getLogger(__name__)

ItemKey = Tuple[str, int]


class DragState(str, Enum):
    """Lifecycle of one movable item."""

    IDLE = "idle"
    DRAGGING = "dragging"
    DROPPED = "dropped"
    COMMITTING = "committing"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a committed move, for activity logging."""

    item_id: int
    item_type: str
    previous_status: str
    new_status: str
    previous_sprint_id: Optional[int] = None
    new_sprint_id: Optional[int] = None


def _key(column: Union[BoardColumn, str]) -> str:
    return column if isinstance(column, str) else column.key


def can_drop(
    item_type: str,
    target_column: Union[BoardColumn, str],
    lanes: Iterable[WorkflowLane],
) -> bool:
    """
    Whether an item of item_type may be dropped on target_column.

    Tasks accept the four fixed columns and any custom lane present in lanes.
    Stories accept only the fixed story columns (backlog, stories, todo,
    inprogress, qa, done); custom lanes never take stories.
    """
    key = _key(target_column)
    if item_type == ITEM_TASK:
        return is_task_column(key, lanes)
    if item_type == ITEM_STORY:
        return key in STORY_COLUMNS
    return False


class DragDropController:
    """
    Per-board move controller.

    Holds the latest snapshot, the drag state of each item, the optimistic
    statuses of moves not yet reflected in a snapshot, and the set of items
    whose move is being committed.
    """

    def __init__(self, gateway, snapshot: BoardSnapshot):
        self.gateway = gateway
        self._snapshot = snapshot
        self._states: Dict[ItemKey, DragState] = {}
        self._optimistic: Dict[ItemKey, Tuple[str, Optional[int]]] = {}
        self._in_flight: Set[ItemKey] = set()

    # --- Snapshot handling ---

    @property
    def snapshot(self) -> BoardSnapshot:
        return self._snapshot

    def accept_snapshot(self, snapshot: BoardSnapshot) -> bool:
        """
        Replace the current snapshot with a newer one.

        Returns:
            False if the snapshot is older than the current one (ignored)
        """
        if snapshot.version < self._snapshot.version:
            logger.debug(
                "Ignoring stale snapshot v%s (have v%s)",
                snapshot.version, self._snapshot.version,
            )
            return False

        self._snapshot = snapshot
        self._optimistic.clear()
        for key, state in list(self._states.items()):
            if key not in self._in_flight and state in (DragState.COMMITTED, DragState.FAILED):
                self._states[key] = DragState.IDLE
        return True

    def current_board(self) -> Board:
        """Board of the current snapshot with optimistic statuses applied."""
        snap = self._snapshot
        if not self._optimistic:
            return build_board(snap)

        tasks = tuple(
            replace(t, status=self._optimistic[(ITEM_TASK, t.id)][0])
            if (ITEM_TASK, t.id) in self._optimistic else t
            for t in snap.tasks
        )
        stories = []
        for s in snap.stories:
            if (ITEM_STORY, s.id) in self._optimistic:
                status, sprint_id = self._optimistic[(ITEM_STORY, s.id)]
                s = replace(s, status=status, sprint_id=sprint_id)
            stories.append(s)

        return build_board(replace(snap, tasks=tasks, stories=tuple(stories)))

    # --- State machine ---

    def state_of(self, item_id: int, item_type: str = ITEM_TASK) -> DragState:
        return self._states.get((item_type, item_id), DragState.IDLE)

    def is_in_flight(self, item_id: int, item_type: str = ITEM_TASK) -> bool:
        return (item_type, item_id) in self._in_flight

    def begin_drag(self, item_id: int, item_type: str = ITEM_TASK) -> DragState:
        """Start dragging an item. Items being committed cannot be picked up."""
        key = (item_type, item_id)
        if key in self._in_flight:
            raise MoveAlreadyInProgressError(item_id)
        self._states[key] = DragState.DRAGGING
        return DragState.DRAGGING

    def cancel_drag(self, item_id: int, item_type: str = ITEM_TASK) -> DragState:
        """Abandon a drag (dropped outside any target). Always a no-op move."""
        key = (item_type, item_id)
        if key not in self._in_flight:
            self._states[key] = DragState.IDLE
        return self.state_of(item_id, item_type)

    def status_of(self, item_id: int, item_type: str = ITEM_TASK) -> Optional[str]:
        """Optimistic status if a move is pending, otherwise the snapshot's."""
        key = (item_type, item_id)
        if key in self._optimistic:
            return self._optimistic[key][0]
        if item_type == ITEM_TASK:
            task = self._snapshot.find_task(item_id)
            return task.status if task else None
        story = self._snapshot.find_story(item_id)
        return story.status if story else None

    async def drop(
        self,
        item_id: int,
        item_type: str,
        target_column: Union[BoardColumn, str],
    ) -> Optional[MoveResult]:
        """
        Finish a drag gesture on target_column.

        Returns:
            MoveResult for a valid drop, None for an invalid target (the item
            returns to IDLE and nothing is persisted)

        Raises:
            MoveAlreadyInProgressError: A move for this item is still committing
            InvalidInputError: The item is not being dragged
        """
        key = (item_type, item_id)
        if key in self._in_flight:
            raise MoveAlreadyInProgressError(item_id)
        if self.state_of(item_id, item_type) != DragState.DRAGGING:
            raise InvalidInputError(
                f"Cannot drop {item_type} {item_id}: it is not being dragged"
            )

        self._states[key] = DragState.DROPPED
        if not can_drop(item_type, target_column, self._snapshot.lanes):
            logger.debug("Invalid drop of %s %s on %s", item_type, item_id, _key(target_column))
            self._states[key] = DragState.IDLE
            return None

        return await self.apply_move(item_id, item_type, target_column)

    async def apply_move(
        self,
        item_id: int,
        item_type: str,
        target_column: Union[BoardColumn, str],
        lanes: Optional[Iterable[WorkflowLane]] = None,
    ) -> MoveResult:
        """
        Validate, optimistically apply, and commit a move.

        Args:
            item_id: Task or story id
            item_type: ITEM_TASK or ITEM_STORY
            target_column: Column variant or column key
            lanes: Lane table to map against (defaults to the snapshot's)

        Returns:
            MoveResult with previous and new status

        Raises:
            MoveAlreadyInProgressError: A move for this item is still committing
            InvalidMoveError: The target does not accept this item type
            TaskNotFoundError / StoryNotFoundError: Item not in the snapshot
            PersistenceError: The status write failed; re-fetch to resync
        """
        key = (item_type, item_id)
        if key in self._in_flight:
            raise MoveAlreadyInProgressError(item_id)
        if item_type not in ITEM_TYPES:
            raise InvalidInputError(
                f"Invalid item type '{item_type}'. Must be one of: {', '.join(ITEM_TYPES)}"
            )

        lanes = list(lanes) if lanes is not None else list(self._snapshot.lanes)
        target = _key(target_column)
        if not can_drop(item_type, target, lanes):
            self._states[key] = DragState.IDLE
            raise InvalidMoveError(item_type, target)

        if item_type == ITEM_TASK:
            task = self._snapshot.find_task(item_id)
            if task is None:
                self._states[key] = DragState.IDLE
                raise TaskNotFoundError(item_id)
            previous_status = self.status_of(item_id, ITEM_TASK)
            new_status = column_to_status(target, lanes)
            previous_sprint = new_sprint = None
        else:
            story = self._snapshot.find_story(item_id)
            if story is None:
                self._states[key] = DragState.IDLE
                raise StoryNotFoundError(item_id)
            previous_status = self.status_of(item_id, ITEM_STORY)
            previous_sprint = self._optimistic.get(key, (None, story.sprint_id))[1]
            new_status = target
            if target == COLUMN_BACKLOG:
                new_sprint = None
            elif target == COLUMN_STORIES and previous_sprint is None:
                new_sprint = self._snapshot.sprint_id
            else:
                new_sprint = previous_sprint

        self._in_flight.add(key)
        self._states[key] = DragState.COMMITTING
        self._optimistic[key] = (new_status, new_sprint)
        try:
            if item_type == ITEM_TASK:
                await self.gateway.update_task_status(item_id, new_status)
            else:
                await self.gateway.update_story_status(item_id, new_status, new_sprint)
        except Exception as e:
            self._optimistic.pop(key, None)
            self._states[key] = DragState.FAILED
            if isinstance(e, PersistenceError):
                logger.error(
                    "Move of %s %s to %s failed, re-fetch required", item_type, item_id, target
                )
            raise
        finally:
            self._in_flight.discard(key)

        self._states[key] = DragState.COMMITTED
        logger.info(
            "Moved %s %s: %s -> %s", item_type, item_id, previous_status, new_status
        )
        return MoveResult(
            item_id=item_id,
            item_type=item_type,
            previous_status=previous_status,
            new_status=new_status,
            previous_sprint_id=previous_sprint,
            new_sprint_id=new_sprint,
        )

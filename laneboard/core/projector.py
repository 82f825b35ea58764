"""
FILE: laneboard/core/projector.py
PURPOSE: Project stories and tasks into the story-by-lane board grid
EXPORTS:
  - WipState, LaneColumn, StoryRow, Board (frozen dataclasses)
  - project_stories(all_stories, sprint_id, include_backlog) -> List[Story]
  - tasks_for_story(story_id, all_tasks, sprint_stories, backlog_stories) -> List[Task]
  - tasks_by_column(column, all_tasks, sprint_stories, backlog_stories, lanes) -> List[Task]
  - wip_state(lane_tasks, lane) -> WipState
  - build_board(snapshot) -> Board
DEPENDENCIES:
  - laneboard.core.mapper (status_to_column, parse_column, column_for_lane)
  - laneboard.core.models
  - laneboard.core.snapshot (BoardSnapshot)
NOTES:
  - Story rows keep creation order; status changes never reorder them
  - Tasks whose parent story is missing or outside the board are dropped
  - WIP state is advisory only, it never blocks a move
  - Custom statuses with no lane are collected as orphaned, not placed in a lane
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .mapper import column_for_lane, parse_column, status_to_column
from .models import BoardColumn, OrphanedColumn, Story, Task, WorkflowLane
from .snapshot import BoardSnapshot


@dataclass(frozen=True)
class WipState:
    """Task count of a lane and whether it exceeds the lane's WIP limit."""

    count: int
    limit: Optional[int]
    over_limit: bool


@dataclass(frozen=True)
class LaneColumn:
    """One lane of the board with every task it holds."""

    lane: WorkflowLane
    column: BoardColumn
    tasks: Tuple[Task, ...]
    wip: WipState

    @property
    def key(self) -> str:
        return self.column.key


@dataclass(frozen=True)
class StoryRow:
    """One story row; cells map column key to the story's tasks in that lane."""

    story: Story
    cells: Dict[str, Tuple[Task, ...]]

    def tasks_in(self, key: str) -> Tuple[Task, ...]:
        return self.cells.get(key, ())


@dataclass(frozen=True)
class Board:
    """The rendered grid for one snapshot."""

    snapshot_version: int
    sprint_id: Optional[int]
    columns: Tuple[LaneColumn, ...]
    rows: Tuple[StoryRow, ...]
    orphaned_tasks: Tuple[Task, ...]

    def column(self, key: str) -> Optional[LaneColumn]:
        return next((c for c in self.columns if c.key == key), None)

    def row(self, story_id: int) -> Optional[StoryRow]:
        return next((r for r in self.rows if r.story.id == story_id), None)

    @property
    def task_count(self) -> int:
        return sum(len(c.tasks) for c in self.columns)


def _story_key(story: Story):
    return (story.created_at or "", story.id)


def _task_key(task: Task):
    # task_number first, creation time second; unnumbered tasks last
    return (
        task.task_number is None,
        task.task_number or 0,
        task.created_at or "",
        task.id,
    )


def project_stories(
    all_stories: Iterable[Story],
    sprint_id: Optional[int],
    include_backlog: bool = False,
) -> List[Story]:
    """
    Stories shown as board rows.

    Args:
        all_stories: Every story of the project
        sprint_id: Active sprint (None = no sprint selected)
        include_backlog: Also show stories without a sprint

    Returns:
        Sprint stories (and backlog stories when requested) in creation order
    """
    selected = [
        s for s in all_stories
        if (sprint_id is not None and s.sprint_id == sprint_id)
        or (include_backlog and s.sprint_id is None)
    ]
    return sorted(selected, key=_story_key)


def _board_story_ids(
    sprint_stories: Iterable[Story], backlog_stories: Iterable[Story]
) -> set:
    return {s.id for s in sprint_stories} | {s.id for s in backlog_stories}


def tasks_for_story(
    story_id: int,
    all_tasks: Iterable[Task],
    sprint_stories: Iterable[Story],
    backlog_stories: Iterable[Story] = (),
) -> List[Task]:
    """Tasks of a story on the board, by (task_number, created_at)."""
    if story_id not in _board_story_ids(sprint_stories, backlog_stories):
        return []
    return sorted((t for t in all_tasks if t.story_id == story_id), key=_task_key)


def _in_column(task: Task, column: BoardColumn, lanes: Sequence[WorkflowLane]) -> bool:
    # Exact status match still works when the lane list is momentarily stale
    if task.status == column.status_value:
        return True
    return status_to_column(task.status, lanes).key == column.key


def tasks_by_column(
    column: Union[BoardColumn, str],
    all_tasks: Iterable[Task],
    sprint_stories: Iterable[Story],
    backlog_stories: Iterable[Story],
    lanes: Iterable[WorkflowLane],
) -> List[Task]:
    """
    Tasks that belong in a column.

    A task qualifies when its story is on the board and either its raw status
    equals the column's status value or it maps to the column's key.
    """
    lanes = list(lanes)
    if isinstance(column, str):
        column = parse_column(column, lanes)

    story_ids = _board_story_ids(sprint_stories, backlog_stories)
    return [
        t for t in all_tasks
        if t.story_id in story_ids and _in_column(t, column, lanes)
    ]


def wip_state(lane_tasks: Sequence[Task], lane: WorkflowLane) -> WipState:
    """Count tasks in a lane and flag it when over an enabled WIP limit."""
    count = len(lane_tasks)
    limit = lane.wip_limit if lane.wip_limit_enabled else None
    over = bool(lane.wip_limit_enabled and lane.wip_limit is not None and count > lane.wip_limit)
    return WipState(count=count, limit=limit, over_limit=over)


def build_board(snapshot: BoardSnapshot) -> Board:
    """
    Build the story x lane grid for a snapshot.

    Runs once per snapshot; the result is immutable and safe to share.
    """
    lanes = list(snapshot.registry.lanes)
    rows_stories = project_stories(
        snapshot.stories, snapshot.sprint_id, snapshot.include_backlog
    )
    sprint_stories = [s for s in rows_stories if s.sprint_id is not None]
    backlog_stories = [s for s in rows_stories if s.sprint_id is None]

    row_tasks = {
        story.id: tasks_for_story(story.id, snapshot.tasks, sprint_stories, backlog_stories)
        for story in rows_stories
    }

    columns = []
    cells: Dict[int, Dict[str, Tuple[Task, ...]]] = {s.id: {} for s in rows_stories}
    for lane in lanes:
        column = column_for_lane(lane)
        in_lane: List[Task] = []
        for story in rows_stories:
            story_tasks = tuple(t for t in row_tasks[story.id] if _in_column(t, column, lanes))
            cells[story.id][column.key] = story_tasks
            in_lane.extend(story_tasks)
        columns.append(
            LaneColumn(
                lane=lane,
                column=column,
                tasks=tuple(in_lane),
                wip=wip_state(in_lane, lane),
            )
        )

    orphaned = tuple(
        t
        for story in rows_stories
        for t in row_tasks[story.id]
        if isinstance(status_to_column(t.status, lanes), OrphanedColumn)
    )

    return Board(
        snapshot_version=snapshot.version,
        sprint_id=snapshot.sprint_id,
        columns=tuple(columns),
        rows=tuple(StoryRow(story=s, cells=cells[s.id]) for s in rows_stories),
        orphaned_tasks=orphaned,
    )

"""Tests for projecting stories and tasks onto the board grid."""

# Path setup handled by conftest.py
from dataclasses import replace

from laneboard.core.models import Story, Task, WorkflowLane
from laneboard.core.projector import (
    build_board,
    project_stories,
    tasks_by_column,
    tasks_for_story,
    wip_state,
)
from laneboard.core.registry import LaneRegistry
from laneboard.core.snapshot import BoardSnapshot


REVIEW = "custom_lane_00aa11bb"


def make_registry(wip_limit=None):
    review = WorkflowLane(
        id="WFLNreview",
        project_id=1,
        title="Review",
        status_value=REVIEW,
        display_order=21,
        wip_limit_enabled=wip_limit is not None,
        wip_limit=wip_limit,
    )
    return LaneRegistry.from_persisted(1, [review])


def make_story(story_id, sprint_id=1, status="stories", day=1):
    return Story(
        id=story_id,
        project_id=1,
        title=f"Story {story_id}",
        status=status,
        sprint_id=sprint_id,
        created_at=f"2025-01-{day:02d}T09:00:00",
    )


def make_task(task_id, story_id, status="TO_DO", number=None):
    return Task(
        id=task_id,
        story_id=story_id,
        title=f"Task {task_id}",
        status=status,
        task_number=number if number is not None else task_id,
    )


def make_snapshot(stories, tasks, wip_limit=None, include_backlog=False):
    return BoardSnapshot(
        project_id=1,
        sprint_id=1,
        registry=make_registry(wip_limit),
        stories=tuple(stories),
        tasks=tuple(tasks),
        include_backlog=include_backlog,
    )


def test_columns_follow_lane_order():
    board = build_board(make_snapshot([make_story(1)], []))

    assert [c.lane.title for c in board.columns] == ["To Do", "In Progress", "Review", "QA", "Done"]
    assert [c.key for c in board.columns] == ["todo", "inprogress", REVIEW, "qa", "done"]


def test_tasks_land_in_their_columns():
    stories = [make_story(1), make_story(2, day=2)]
    tasks = [
        make_task(1, 1),
        make_task(2, 1, status="IN_PROGRESS"),
        make_task(3, 2, status=REVIEW),
        make_task(4, 2, status="DONE"),
    ]
    board = build_board(make_snapshot(stories, tasks))

    assert [t.id for t in board.column("todo").tasks] == [1]
    assert [t.id for t in board.column(REVIEW).tasks] == [3]
    assert [t.id for t in board.row(2).tasks_in("done")] == [4]
    assert board.row(1).tasks_in(REVIEW) == ()
    assert board.task_count == 4


def test_wip_limit_exactly_reached_is_not_over():
    tasks = [make_task(i, 1, status=REVIEW) for i in range(1, 4)]
    column = build_board(make_snapshot([make_story(1)], tasks, wip_limit=3)).column(REVIEW)

    assert column.wip.count == 3
    assert column.wip.limit == 3
    assert not column.wip.over_limit


def test_wip_limit_exceeded_is_flagged():
    tasks = [make_task(i, 1, status=REVIEW) for i in range(1, 5)]
    column = build_board(make_snapshot([make_story(1)], tasks, wip_limit=3)).column(REVIEW)

    assert column.wip.count == 4
    assert column.wip.over_limit


def test_wip_limit_ignored_when_disabled():
    lane = WorkflowLane(
        id="X", project_id=1, title="X", status_value="custom_lane_x",
        display_order=21, wip_limit_enabled=False, wip_limit=1,
    )
    state = wip_state([make_task(1, 1), make_task(2, 1)], lane)

    assert state.limit is None
    assert not state.over_limit


def test_story_rows_keep_creation_order():
    """Moving a story between columns never reorders the rows."""
    stories = [
        make_story(3, status="done", day=1),
        make_story(1, status="stories", day=2),
        make_story(2, status="inprogress", day=3),
    ]
    board = build_board(make_snapshot(stories, []))

    assert [r.story.id for r in board.rows] == [3, 1, 2]


def test_other_sprint_and_backlog_stories_hidden():
    stories = [make_story(1), make_story(2, sprint_id=2), make_story(3, sprint_id=None, status="backlog")]
    tasks = [make_task(1, 1), make_task(2, 2), make_task(3, 3)]
    board = build_board(make_snapshot(stories, tasks))

    assert [r.story.id for r in board.rows] == [1]
    assert [t.id for t in board.column("todo").tasks] == [1]


def test_backlog_included_on_request():
    stories = [make_story(1), make_story(2, sprint_id=None, status="backlog", day=2)]
    tasks = [make_task(1, 1), make_task(2, 2)]
    board = build_board(make_snapshot(stories, tasks, include_backlog=True))

    assert [r.story.id for r in board.rows] == [1, 2]
    assert [t.id for t in board.column("todo").tasks] == [1, 2]


def test_orphaned_tasks_collected_not_placed():
    tasks = [make_task(1, 1, status="custom_lane_gone0000"), make_task(2, 1)]
    board = build_board(make_snapshot([make_story(1)], tasks))

    assert [t.id for t in board.orphaned_tasks] == [1]
    assert [t.id for t in board.column("todo").tasks] == [2]
    assert board.task_count == 1


def test_tasks_for_story_sorted_by_number():
    stories = [make_story(1)]
    tasks = [make_task(10, 1, number=3), make_task(11, 1, number=1), make_task(12, 1, number=2)]

    assert [t.id for t in tasks_for_story(1, tasks, stories)] == [11, 12, 10]
    assert tasks_for_story(99, tasks, stories) == []


def test_tasks_by_column_accepts_key():
    stories = [make_story(1)]
    tasks = [make_task(1, 1, status=REVIEW), make_task(2, 1)]
    lanes = make_registry().list_lanes()

    assert [t.id for t in tasks_by_column(REVIEW, tasks, stories, [], lanes)] == [1]
    assert [t.id for t in tasks_by_column("todo", tasks, stories, [], lanes)] == [2]


def test_project_stories_without_sprint():
    stories = [make_story(1), make_story(2, sprint_id=None)]

    assert project_stories(stories, None) == []
    assert [s.id for s in project_stories(stories, None, include_backlog=True)] == [2]


def test_story_rows_unchanged_when_task_moves_lanes():
    stories = [make_story(2, day=1), make_story(1, day=2), make_story(3, day=3)]
    tasks = [make_task(1, 1), make_task(2, 2, status="IN_PROGRESS"), make_task(3, 3)]
    before = build_board(make_snapshot(stories, tasks))

    moved = [replace(t, status=REVIEW) if t.id == 1 else t for t in tasks]
    after = build_board(make_snapshot(stories, moved))

    assert [r.story.id for r in after.rows] == [r.story.id for r in before.rows] == [2, 1, 3]
    assert after.row(1).tasks_in("todo") == ()
    assert [t.id for t in after.row(1).tasks_in(REVIEW)] == [1]

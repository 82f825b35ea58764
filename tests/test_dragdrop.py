"""Tests for the drag-and-drop controller: drop rules, commits and in-flight guard."""

# Path setup handled by conftest.py
import asyncio

import pytest

from laneboard.core.dragdrop import DragDropController, DragState, can_drop
from laneboard.core.exceptions import (
    InvalidInputError,
    InvalidMoveError,
    MoveAlreadyInProgressError,
    PersistenceError,
    StoryNotFoundError,
    TaskNotFoundError,
)
from laneboard.core.models import Story, Task, WorkflowLane
from laneboard.core.registry import LaneRegistry
from laneboard.core.snapshot import BoardSnapshot


REVIEW = "custom_lane_5e5e5e5e"


class RecordingGateway:
    """Gateway double that records writes and optionally blocks until released."""

    def __init__(self, block=False, fail=False):
        self.calls = []
        self.block = block
        self.fail = fail
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def _write(self, call):
        self.calls.append(call)
        self.started.set()
        if self.block:
            await self.release.wait()
        if self.fail:
            raise PersistenceError("update task status", RuntimeError("connection reset"))

    async def update_task_status(self, task_id, status):
        await self._write(("task", task_id, status))

    async def update_story_status(self, story_id, status, sprint_id):
        await self._write(("story", story_id, status, sprint_id))


def make_snapshot(version=None):
    review = WorkflowLane(
        id="WFLNreview", project_id=1, title="Review", status_value=REVIEW, display_order=21,
    )
    stories = (
        Story(id=1, project_id=1, title="Login", status="stories", sprint_id=1,
              created_at="2025-01-01T09:00:00"),
        Story(id=2, project_id=1, title="Export", status="backlog", sprint_id=None,
              created_at="2025-01-02T09:00:00"),
    )
    tasks = (
        Task(id=1, story_id=1, title="Form", status="TO_DO", task_number=1),
        Task(id=2, story_id=1, title="API", status="IN_PROGRESS", task_number=2),
    )
    kwargs = {} if version is None else {"version": version}
    return BoardSnapshot(
        project_id=1,
        sprint_id=1,
        registry=LaneRegistry.from_persisted(1, [review]),
        stories=stories,
        tasks=tasks,
        include_backlog=True,
        **kwargs,
    )


def test_can_drop_rules():
    lanes = make_snapshot().lanes

    assert can_drop("task", "qa", lanes)
    assert can_drop("task", REVIEW, lanes)
    assert not can_drop("task", "backlog", lanes)
    assert can_drop("story", "backlog", lanes)
    assert can_drop("story", "done", lanes)
    assert not can_drop("story", REVIEW, lanes)
    assert not can_drop("epic", "todo", lanes)


def test_task_move_to_custom_lane_commits():
    async def scenario():
        gateway = RecordingGateway()
        controller = DragDropController(gateway, make_snapshot())
        result = await controller.apply_move(1, "task", REVIEW)
        return gateway, controller, result

    gateway, controller, result = asyncio.run(scenario())

    assert gateway.calls == [("task", 1, REVIEW)]
    assert result.previous_status == "TO_DO"
    assert result.new_status == REVIEW
    assert controller.state_of(1) == DragState.COMMITTED
    # The optimistic status is shown until the next snapshot arrives
    assert controller.status_of(1) == REVIEW
    assert [t.id for t in controller.current_board().column(REVIEW).tasks] == [1]


def test_second_move_while_in_flight_is_rejected():
    async def scenario():
        gateway = RecordingGateway(block=True)
        controller = DragDropController(gateway, make_snapshot())

        first = asyncio.ensure_future(controller.apply_move(1, "task", "inprogress"))
        await gateway.started.wait()

        assert controller.is_in_flight(1)
        assert controller.state_of(1) == DragState.COMMITTING
        with pytest.raises(MoveAlreadyInProgressError):
            await controller.apply_move(1, "task", "qa")
        with pytest.raises(MoveAlreadyInProgressError):
            controller.begin_drag(1)

        gateway.release.set()
        result = await first
        return gateway, controller, result

    gateway, controller, result = asyncio.run(scenario())

    assert gateway.calls == [("task", 1, "IN_PROGRESS")]
    assert result.new_status == "IN_PROGRESS"
    assert not controller.is_in_flight(1)


def test_invalid_drop_returns_to_idle_without_writing():
    async def scenario():
        gateway = RecordingGateway()
        controller = DragDropController(gateway, make_snapshot())
        controller.begin_drag(1, "story")
        outcome = await controller.drop(1, "story", REVIEW)
        return gateway, controller, outcome

    gateway, controller, outcome = asyncio.run(scenario())

    assert outcome is None
    assert gateway.calls == []
    assert controller.state_of(1, "story") == DragState.IDLE


def test_apply_move_to_invalid_target_raises():
    async def scenario():
        controller = DragDropController(RecordingGateway(), make_snapshot())
        with pytest.raises(InvalidMoveError):
            await controller.apply_move(1, "task", "backlog")
        with pytest.raises(InvalidMoveError):
            await controller.apply_move(1, "story", REVIEW)
        with pytest.raises(TaskNotFoundError):
            await controller.apply_move(99, "task", "qa")

    asyncio.run(scenario())


def test_story_to_backlog_leaves_sprint():
    async def scenario():
        gateway = RecordingGateway()
        controller = DragDropController(gateway, make_snapshot())
        return gateway, await controller.apply_move(1, "story", "backlog")

    gateway, result = asyncio.run(scenario())

    assert gateway.calls == [("story", 1, "backlog", None)]
    assert result.previous_sprint_id == 1
    assert result.new_sprint_id is None


def test_backlog_story_to_stories_joins_current_sprint():
    async def scenario():
        gateway = RecordingGateway()
        controller = DragDropController(gateway, make_snapshot())
        return gateway, await controller.apply_move(2, "story", "stories")

    gateway, result = asyncio.run(scenario())

    assert gateway.calls == [("story", 2, "stories", 1)]
    assert result.new_sprint_id == 1


def test_story_between_stage_columns_keeps_sprint():
    async def scenario():
        gateway = RecordingGateway()
        controller = DragDropController(gateway, make_snapshot())
        return gateway, await controller.apply_move(1, "story", "qa")

    gateway, result = asyncio.run(scenario())

    assert gateway.calls == [("story", 1, "qa", 1)]


def test_failed_commit_clears_optimistic_state():
    async def scenario():
        controller = DragDropController(RecordingGateway(fail=True), make_snapshot())
        with pytest.raises(PersistenceError):
            await controller.apply_move(1, "task", "done")
        return controller

    controller = asyncio.run(scenario())

    assert controller.state_of(1) == DragState.FAILED
    assert controller.status_of(1) == "TO_DO"
    assert not controller.is_in_flight(1)


def test_newer_snapshot_replaces_optimistic_statuses():
    async def scenario():
        controller = DragDropController(RecordingGateway(), make_snapshot(version=5))
        await controller.apply_move(1, "task", "done")
        return controller

    controller = asyncio.run(scenario())
    assert controller.status_of(1) == "DONE"

    assert not controller.accept_snapshot(make_snapshot(version=4))
    assert controller.snapshot.version == 5

    assert controller.accept_snapshot(make_snapshot(version=6))
    assert controller.status_of(1) == "TO_DO"
    assert controller.state_of(1) == DragState.IDLE


def test_cancel_drag_is_a_no_op():
    controller = DragDropController(RecordingGateway(), make_snapshot())

    assert controller.begin_drag(2) == DragState.DRAGGING
    assert controller.cancel_drag(2) == DragState.IDLE
    assert controller.status_of(2) == "IN_PROGRESS"


def test_drag_then_drop_commits():
    async def scenario():
        gateway = RecordingGateway()
        controller = DragDropController(gateway, make_snapshot())
        assert controller.begin_drag(1) == DragState.DRAGGING
        result = await controller.drop(1, "task", "qa")
        return gateway, controller, result

    gateway, controller, result = asyncio.run(scenario())

    assert gateway.calls == [("task", 1, "QA_REVIEW")]
    assert result.new_status == "QA_REVIEW"
    assert controller.state_of(1) == DragState.COMMITTED


def test_drop_without_drag_is_refused():
    async def scenario():
        gateway = RecordingGateway()
        controller = DragDropController(gateway, make_snapshot())
        with pytest.raises(InvalidInputError):
            await controller.drop(1, "task", "qa")
        return gateway, controller

    gateway, controller = asyncio.run(scenario())

    assert gateway.calls == []
    assert controller.state_of(1) == DragState.IDLE


@pytest.mark.parametrize("item_type,error", [
    ("task", TaskNotFoundError),
    ("story", StoryNotFoundError),
])
def test_drop_of_unknown_item_returns_to_idle(item_type, error):
    async def scenario():
        gateway = RecordingGateway()
        controller = DragDropController(gateway, make_snapshot())
        controller.begin_drag(99, item_type)
        with pytest.raises(error):
            await controller.drop(99, item_type, "done")
        return gateway, controller

    gateway, controller = asyncio.run(scenario())

    assert gateway.calls == []
    assert controller.state_of(99, item_type) == DragState.IDLE
    assert not controller.is_in_flight(99, item_type)

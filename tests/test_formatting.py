"""Tests for lane and board output formatting."""

# Path setup handled by conftest.py
import json

from rich.console import Console

from laneboard.core.models import Story, Task, WorkflowLane
from laneboard.core.projector import WipState, build_board
from laneboard.core.registry import LaneRegistry
from laneboard.core.snapshot import BoardSnapshot
from laneboard.formatting import BoardFormatter, LaneFormatter, print_json, wip_label


UAT = "custom_lane_0badcafe"


def make_board():
    uat = WorkflowLane(
        id="WFLNuat", project_id=1, title="UAT", status_value=UAT, display_order=31,
        color="#F59E0B", wip_limit_enabled=True, wip_limit=1,
    )
    snapshot = BoardSnapshot(
        project_id=1,
        sprint_id=1,
        registry=LaneRegistry.from_persisted(1, [uat]),
        stories=(Story(id=1, project_id=1, title="Checkout", sprint_id=1),),
        tasks=(
            Task(id=1, story_id=1, title="Sign-off", status=UAT, task_number=1),
            Task(id=2, story_id=1, title="Smoke test", status=UAT, task_number=2),
            Task(id=3, story_id=1, title="Old step", status="custom_lane_gone0000", task_number=3),
        ),
    )
    return build_board(snapshot)


def test_wip_label():
    assert wip_label(WipState(count=3, limit=None, over_limit=False)) == "3"
    assert wip_label(WipState(count=3, limit=4, over_limit=False)) == "3/4"


def test_lane_json_includes_section():
    lanes = make_board().columns
    data = LaneFormatter.to_json_dict(lanes[3].lane)

    assert data["title"] == "UAT"
    assert data["section"] == "customAfterQA"
    assert data["wip_limit"] == 1


def test_lane_raw_lines():
    lanes = LaneRegistry.from_persisted(1, []).list_lanes()
    assert LaneFormatter.to_raw_lines(lanes)[0] == "10\tTO_DO\tTo Do"


def test_board_json():
    data = BoardFormatter.to_json_dict(make_board())

    uat = next(c for c in data["columns"] if c["key"] == UAT)
    assert uat["task_ids"] == [1, 2]
    assert uat["wip"] == {"count": 2, "limit": 1, "over_limit": True}
    assert data["rows"][0]["cells"][UAT] == [1, 2]
    assert data["orphaned_task_ids"] == [3]


def test_board_raw_lines_flag_over_limit():
    lines = BoardFormatter.to_raw_lines(make_board())

    assert f"{UAT}\tUAT\t2/1 OVER" in lines
    assert "orphaned\t3: Old step (custom_lane_gone0000)" in lines


def test_board_table_and_orphan_warning_render():
    board = make_board()
    console = Console(record=True, width=160)

    console.print(BoardFormatter.create_table(board, title="Board - Webshop"))
    warning = BoardFormatter.orphan_warning(board)
    assert warning

    text = console.export_text()
    assert "Checkout" in text
    assert "UAT" in text


def test_print_json_is_parseable():
    console = Console(record=True, width=20)
    print_json(console, {"title": "A fairly long lane title that would wrap", "order": 21})

    assert json.loads(console.export_text())["order"] == 21

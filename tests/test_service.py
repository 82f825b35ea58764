"""Tests for lane management and moves through the service layer."""

# Path setup handled by conftest.py
import pytest

from laneboard import config
from laneboard.core import repository, service
from laneboard.core.exceptions import (
    DuplicateLaneTitleError,
    EmptyTitleError,
    InvalidInputError,
    InvalidMoveError,
    InvalidReorderError,
    LaneNotFoundError,
    ProjectNotFoundError,
    TaskNotFoundError,
)


@pytest.fixture(autouse=True)
def temp_db(monkeypatch, tmp_path):
    """Use temporary database for all tests."""
    db_path = tmp_path / "test_laneboard.db"
    monkeypatch.setattr(repository, "DB_PATH", db_path)
    monkeypatch.setattr(repository, "DB_DIR", tmp_path)
    monkeypatch.setattr(config, "_settings", config.Settings(data_dir=str(tmp_path)))
    yield db_path


@pytest.fixture
def project():
    return service.create_project("Webshop")


@pytest.fixture
def sprint(project):
    return service.create_sprint(project.id, "Sprint 1")


def lane_titles(project_id):
    return [lane.title for lane in service.get_registry(project_id).list_lanes()]


# --- Projects, sprints, stories ---


def test_project_names_unique(project):
    with pytest.raises(InvalidInputError, match="already exists"):
        service.create_project("Webshop")
    with pytest.raises(InvalidInputError):
        service.create_project("   ")


def test_find_project_by_id_or_name(project):
    assert service.find_project_or_raise(str(project.id)) == project
    assert service.find_project_or_raise("webshop") == project
    with pytest.raises(InvalidInputError, match="Available projects: Webshop"):
        service.find_project_or_raise("Intranet")


def test_first_sprint_becomes_active(project):
    first = service.create_sprint(project.id, "Sprint 1")
    second = service.create_sprint(project.id, "Sprint 2")

    assert first.is_active
    assert not second.is_active
    assert service.activate_sprint(second.id).is_active


def test_story_goes_to_active_sprint_or_backlog(project):
    parked = service.create_story(project.id, "Wishlist")
    assert parked.sprint_id is None
    assert parked.status == "backlog"

    sprint = service.create_sprint(project.id, "Sprint 1")
    story = service.create_story(project.id, "Checkout")
    assert story.sprint_id == sprint.id
    assert story.status == "stories"

    assert service.create_story(project.id, "Later", backlog=True).in_backlog


def test_task_title_required(project):
    story = service.create_story(project.id, "Checkout")
    with pytest.raises(InvalidInputError):
        service.create_task(story.id, " ")


# --- Lanes ---


def test_first_lane_after_in_progress_gets_order_21(project):
    lane = service.create_lane(project.id, "Design Review", "inprogress")

    assert lane.display_order == 21
    assert lane.status_value.startswith("custom_lane_")
    assert lane_titles(project.id) == ["To Do", "In Progress", "Design Review", "QA", "Done"]


def test_lanes_append_within_their_section(project):
    service.create_lane(project.id, "Design Review", "inprogress")
    code = service.create_lane(project.id, "Code Review", "inprogress")
    uat = service.create_lane(project.id, "UAT", "qa")

    assert code.display_order == 22
    assert uat.display_order == 31
    assert lane_titles(project.id) == [
        "To Do", "In Progress", "Design Review", "Code Review", "QA", "UAT", "Done",
    ]


def test_duplicate_title_rejected_before_write(project):
    service.create_lane(project.id, "Design Review", "inprogress")

    with pytest.raises(DuplicateLaneTitleError):
        service.create_lane(project.id, "design review ", "qa")

    assert len(repository.list_lanes_by_project(project.id)) == 1


def test_empty_title_rejected(project):
    with pytest.raises(EmptyTitleError):
        service.create_lane(project.id, "  ", "qa")
    assert repository.list_lanes_by_project(project.id) == []


def test_lane_options_validated(project):
    with pytest.raises(InvalidInputError):
        service.create_lane(project.id, "UAT", "done")
    with pytest.raises(InvalidInputError):
        service.create_lane(project.id, "UAT", "qa", color="blue")
    with pytest.raises(InvalidInputError):
        service.create_lane(project.id, "UAT", "qa", wip_limit=0)
    with pytest.raises(ProjectNotFoundError):
        service.create_lane(999, "UAT", "qa")


def test_lane_colour_and_wip(project):
    lane = service.create_lane(project.id, "UAT", "qa", color="10b981", wip_limit=3)

    assert lane.color == "#10B981"
    assert lane.wip_limit_enabled
    assert lane.wip_limit == 3


def test_update_lane(project):
    lane = service.create_lane(project.id, "UAT", "qa", wip_limit=3)
    service.create_lane(project.id, "Staging", "qa")

    renamed = service.update_lane(project.id, "uat", title="User Acceptance", clear_wip=True)
    assert renamed.title == "User Acceptance"
    assert renamed.status_value == lane.status_value
    assert not renamed.wip_limit_enabled

    with pytest.raises(DuplicateLaneTitleError):
        service.update_lane(project.id, lane.id, title="STAGING")

    # Case-only rename of the same lane is allowed
    assert service.update_lane(project.id, lane.id, title="USER ACCEPTANCE").title == "USER ACCEPTANCE"


def test_builtin_lanes_cannot_be_edited(project):
    with pytest.raises(LaneNotFoundError):
        service.update_lane(project.id, "QA", title="Testing")
    with pytest.raises(LaneNotFoundError):
        service.update_lane(project.id, "Nope", title="Testing")


def test_reorder_lanes(project):
    service.create_lane(project.id, "Design Review", "inprogress")
    service.create_lane(project.id, "Code Review", "inprogress")
    service.create_lane(project.id, "UAT", "qa")

    ordered = service.reorder_lanes(project.id, ["Code Review", "UAT", "Design Review"])

    assert [l.title for l in ordered] == [
        "To Do", "In Progress", "Code Review", "Design Review", "QA", "UAT", "Done",
    ]
    with pytest.raises(InvalidReorderError):
        service.reorder_lanes(project.id, ["Code Review", "UAT"])
    with pytest.raises(InvalidReorderError):
        service.reorder_lanes(project.id, ["Code Review", "UAT", "Design Review", "QA"])


# --- Board and moves ---


def test_move_task_into_custom_lane_and_back(project, sprint):
    lane = service.create_lane(project.id, "Design Review", "inprogress")
    story = service.create_story(project.id, "Checkout")
    task = service.create_task(story.id, "Mockups")

    result = service.move_task(task.id, "Design Review")
    assert result.previous_status == "TO_DO"
    assert result.new_status == lane.status_value
    assert repository.get_task(task.id).status == lane.status_value

    _, board = service.load_board(project.id)
    assert [t.id for t in board.column(lane.status_value).tasks] == [task.id]

    service.move_task(task.id, "qa")
    assert repository.get_task(task.id).status == "QA_REVIEW"


def test_move_task_errors(project, sprint):
    story = service.create_story(project.id, "Checkout")
    task = service.create_task(story.id, "Mockups")

    with pytest.raises(TaskNotFoundError):
        service.move_task(999, "qa")
    with pytest.raises(InvalidMoveError):
        service.move_task(task.id, "backlog")
    with pytest.raises(InvalidMoveError):
        service.move_task(task.id, "Nowhere")
    assert repository.get_task(task.id).status == "TO_DO"


def test_move_story_between_backlog_and_sprint(project, sprint):
    story = service.create_story(project.id, "Wishlist", backlog=True)

    joined = service.move_story(story.id, "stories")
    assert joined.new_sprint_id == sprint.id
    assert repository.get_story(story.id).sprint_id == sprint.id

    service.move_story(story.id, "backlog")
    assert repository.get_story(story.id).in_backlog


def test_story_cannot_enter_custom_lane(project, sprint):
    service.create_lane(project.id, "Design Review", "inprogress")
    story = service.create_story(project.id, "Checkout")

    with pytest.raises(InvalidMoveError):
        service.move_story(story.id, "Design Review")


def test_deleting_lane_orphans_its_tasks(project, sprint):
    service.create_lane(project.id, "UAT", "qa")
    story = service.create_story(project.id, "Checkout")
    task = service.create_task(story.id, "Sign-off")
    service.move_task(task.id, "UAT")

    assert service.delete_lane(project.id, "UAT") == 1

    _, board = service.load_board(project.id)
    assert [t.id for t in board.orphaned_tasks] == [task.id]
    assert board.task_count == 0


def test_resolve_column_key(project):
    lane = service.create_lane(project.id, "Design Review", "inprogress")
    registry = service.get_registry(project.id)

    assert service.resolve_column_key(registry, "QA") == "qa"
    assert service.resolve_column_key(registry, "design review") == lane.status_value
    assert service.resolve_column_key(registry, lane.status_value) == lane.status_value
    assert service.resolve_column_key(registry, "Done") == "done"
    assert service.resolve_column_key(registry, "Limbo") == "limbo"

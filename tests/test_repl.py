"""Tests for the REPL parser, completer and command dispatch."""

# Path setup handled by conftest.py
import asyncio
import threading

import pytest
from prompt_toolkit.document import Document

from laneboard import config
from laneboard.core import repository, service
from laneboard.core.snapshot import load_snapshot
from laneboard.repl.completer import create_completer
from laneboard.repl.context import repl_context
from laneboard.repl.main import execute_command
from laneboard.repl.parser import parse_command


@pytest.fixture(autouse=True)
def temp_db(monkeypatch, tmp_path):
    """Use temporary database for all tests."""
    db_path = tmp_path / "test_laneboard.db"
    monkeypatch.setattr(repository, "DB_PATH", db_path)
    monkeypatch.setattr(repository, "DB_DIR", tmp_path)
    monkeypatch.setattr(config, "_settings", config.Settings(data_dir=str(tmp_path)))
    yield db_path


def completions(completer, text):
    doc = Document(text, cursor_position=len(text))
    return [c.text for c in completer.get_completions(doc, None)]


# --- Parser ---


def test_parse_quoted_args_and_flags():
    result = parse_command('lane add "Design Review" --after inprogress --wip 3')

    assert result.command == "lane"
    assert result.args == ["add", "Design Review"]
    assert result.flags == {"after": "inprogress", "wip": 3}
    assert result.ok


def test_parse_boolean_flag():
    result = parse_command("USE Web --backlog")

    assert result.command == "use"
    assert result.args == ["Web"]
    assert result.flags == {"backlog": True}


def test_parse_switch_does_not_swallow_next_token():
    result = parse_command("use Web --backlog App --sprint=2")

    assert result.args == ["Web", "App"]
    assert result.flags == {"backlog": True, "sprint": 2}


@pytest.mark.parametrize("line,error", [
    ("mv 4 --fast qa", "Unknown option --fast for 'mv'"),
    ("lane add UAT --wip many", "--wip expects a number, got 'many'"),
    ("lane add UAT --after", "--after needs a value"),
    ("lane edit UAT --after --wip 2", "--after needs a value"),
    ("use Web --backlog=yes", "--backlog takes no value"),
])
def test_parse_reports_flag_errors(line, error):
    result = parse_command(line)

    assert not result.ok
    assert result.errors == [error]


def test_parse_unclosed_quote_falls_back():
    result = parse_command('mv 4 "Design Review')
    assert result.args == ["4", '"Design', "Review"]


def test_parse_empty_input():
    assert parse_command("   ").command == ""


# --- Completer ---


def test_command_completion():
    completer = create_completer()

    assert "mv" in completions(completer, "m")
    assert "smv" in completions(completer, "s")
    assert completions(completer, "lane ") == ["add", "edit", "rm", "reorder"]
    assert completions(completer, "lane add X --after ") == ["inprogress", "qa"]
    assert completions(completer, "lane add X --w") == ["--wip"]
    assert completions(completer, "board --") == []


def test_move_target_completion_uses_snapshot():
    project = service.create_project("Webshop")
    service.create_sprint(project.id, "Sprint 1")
    story = service.create_story(project.id, "Checkout")
    task = service.create_task(story.id, "Mockups")
    service.create_lane(project.id, "Design Review", "inprogress")
    snapshot = load_snapshot(project.id)

    completer = create_completer(lambda: snapshot)

    assert completions(completer, "mv ") == [str(task.id)]
    assert completions(completer, "smv ") == [str(story.id)]
    targets = completions(completer, f"mv {task.id} ")
    assert targets == ["todo", "inprogress", "qa", "done", '"Design Review"']
    assert completions(completer, f"mv {task.id} d") == ["done", '"Design Review"']
    assert "backlog" in completions(completer, f"smv {story.id} ")
    assert completions(completer, "lane rm ") == ['"Design Review"']


def test_project_name_completion():
    service.create_project("Webshop")
    service.create_project("Intranet")

    assert completions(create_completer(), "use W") == ["Webshop"]


# --- Dispatch ---


def test_exit_and_unknown_commands(capsys):
    assert asyncio.run(execute_command(parse_command("exit"))) is False
    assert asyncio.run(execute_command(parse_command(""))) is True
    assert asyncio.run(execute_command(parse_command("frobnicate"))) is True
    assert "Unknown command" in capsys.readouterr().out


def test_board_without_project(capsys):
    asyncio.run(execute_command(parse_command("board")))
    assert "No project selected" in capsys.readouterr().out


def test_session_moves_and_lane_changes(capsys):
    project = service.create_project("Webshop")
    service.create_sprint(project.id, "Sprint 1")
    story = service.create_story(project.id, "Checkout")
    task = service.create_task(story.id, "Mockups")

    async def scenario():
        try:
            await execute_command(parse_command("use Webshop"))
            assert repl_context.controller is not None

            await execute_command(parse_command('lane add "Design Review" --after inprogress'))
            await execute_command(parse_command(f'mv {task.id} "Design Review"'))
            await execute_command(parse_command(f"smv {story.id} inprogress"))
            await execute_command(parse_command("board"))
            await execute_command(parse_command(f"mv {task.id} backlog"))
        finally:
            await repl_context.close()
            repl_context.current_project = None

    asyncio.run(scenario())

    lane = service.get_registry(project.id).find_by_title("Design Review")
    assert lane.display_order == 21
    assert repository.get_task(task.id).status == lane.status_value
    assert repository.get_story(story.id).status == "inprogress"

    out = capsys.readouterr().out
    assert "Using project" in out
    assert "Design Review" in out
    assert "Cannot move task" in out


def test_flag_errors_stop_the_command(capsys):
    project = service.create_project("Webshop")

    async def scenario():
        try:
            await execute_command(parse_command("use Webshop"))
            await execute_command(parse_command("lane add UAT --wip many"))
        finally:
            await repl_context.close()
            repl_context.current_project = None

    asyncio.run(scenario())

    assert service.get_registry(project.id).find_by_title("UAT") is None
    assert "--wip expects a number" in capsys.readouterr().out


def test_lane_rm_confirmation_keeps_loop_running(monkeypatch, capsys):
    """The board refresher must be able to run while the prompt waits for y/n."""
    project = service.create_project("Webshop")
    service.create_lane(project.id, "UAT", "qa")
    loop_ran = threading.Event()

    def answer(prompt):
        return "y" if loop_ran.wait(timeout=2) else "n"

    monkeypatch.setattr("builtins.input", answer)

    async def tick():
        await asyncio.sleep(0)
        loop_ran.set()

    async def scenario():
        try:
            await execute_command(parse_command("use Webshop"))
            ticker = asyncio.ensure_future(tick())
            await execute_command(parse_command("lane rm UAT"))
            await ticker
        finally:
            await repl_context.close()
            repl_context.current_project = None

    asyncio.run(scenario())

    assert service.get_registry(project.id).find_by_title("UAT") is None
    assert "Deleted lane UAT" in capsys.readouterr().out

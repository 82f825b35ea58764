"""
FILE: laneboard/formatting.py
PURPOSE: Shared formatting utilities for CLI and REPL output
EXPORTS:
  - LaneFormatter: Lane table, JSON and raw output
  - BoardFormatter: Board grid, JSON and raw output
  - print_json(console, data): Emit JSON without Rich markup or wrapping
  - wip_label(wip) -> str
DEPENDENCIES:
  - rich (for table formatting)
  - json (for JSON serialization)
  - laneboard.core.models, laneboard.core.projector
NOTES:
  - Used by both CLI and REPL
  - Lane headers use the lane colour; cells use its tint as background
  - Over-limit lanes are flagged in red, nothing is blocked
"""

import json
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .core.models import Story, Task, WorkflowLane
from .core.projector import Board, LaneColumn, WipState
from .core.registry import classify_lane


def print_json(console: Console, data: Any) -> None:
    """Print JSON exactly, so scripts can parse stdout."""
    text = data if isinstance(data, str) else json.dumps(data, indent=2)
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def wip_label(wip: WipState) -> str:
    """'3' without a limit, '3/4' with one."""
    if wip.limit is None:
        return str(wip.count)
    return f"{wip.count}/{wip.limit}"


class LaneFormatter:
    """Lane list display formatting."""

    @staticmethod
    def create_table(lanes: List[WorkflowLane], title: str = "Lanes") -> Table:
        """
        Create Rich table for lanes in board order.

        Args:
            lanes: Lanes as returned by LaneRegistry.list_lanes()
            title: Table title

        Returns:
            Rich Table object ready for display
        """
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Order", style="dim", justify="right", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Status", style="cyan", no_wrap=True)
        table.add_column("Section", style="magenta")
        table.add_column("WIP", justify="right")
        table.add_column("Colour", no_wrap=True)

        for lane in lanes:
            wip = str(lane.wip_limit) if lane.wip_limit_enabled else "-"
            swatch = Text("■ ", style=lane.color) + Text(lane.color, style="dim")
            title_text = lane.title if not lane.is_fixed else f"[bold]{lane.title}[/bold]"
            table.add_row(
                str(lane.display_order),
                title_text,
                lane.status_value,
                classify_lane(lane),
                wip,
                swatch,
            )

        return table

    @staticmethod
    def to_json_dict(lane: WorkflowLane) -> Dict[str, Any]:
        data = asdict(lane)
        data["section"] = classify_lane(lane)
        return data

    @staticmethod
    def to_raw_lines(lanes: List[WorkflowLane]) -> List[str]:
        return [f"{lane.display_order}\t{lane.status_value}\t{lane.title}" for lane in lanes]


class BoardFormatter:
    """Story x lane grid formatting."""

    @staticmethod
    def _header(column: LaneColumn) -> Text:
        header = Text(column.lane.title, style=f"bold {column.lane.color}")
        style = "bold red" if column.wip.over_limit else "dim"
        header.append(f"\n{wip_label(column.wip)}", style=style)
        return header

    @staticmethod
    def _cell(tasks: tuple) -> str:
        return "\n".join(f"#{t.id} {t.title}" for t in tasks)

    @staticmethod
    def create_table(board: Board, title: Optional[str] = None) -> Table:
        """
        Create Rich table for a board: one row per story, one column per lane.

        Args:
            board: Projected board
            title: Table title (defaults to "Board")

        Returns:
            Rich Table object ready for display
        """
        table = Table(title=title or "Board", show_header=True, show_lines=True)
        table.add_column("Story", style="bold white", min_width=12)
        for column in board.columns:
            table.add_column(
                BoardFormatter._header(column),
                style=f"on {column.lane.tint(0.9)}" if not column.lane.is_fixed else None,
                min_width=10,
            )

        for row in board.rows:
            story_label = f"#{row.story.id} {row.story.title}"
            if row.story.in_backlog:
                story_label += "\n[dim]backlog[/dim]"
            cells = [BoardFormatter._cell(row.tasks_in(c.key)) for c in board.columns]
            table.add_row(story_label, *cells)

        return table

    @staticmethod
    def orphan_warning(board: Board) -> Optional[str]:
        """Warning line for tasks whose lane was deleted, or None."""
        if not board.orphaned_tasks:
            return None
        ids = ", ".join(f"#{t.id}" for t in board.orphaned_tasks)
        return (
            f"[yellow]Warning:[/yellow] {len(board.orphaned_tasks)} task(s) belong to "
            f"deleted lanes and are hidden: {ids}"
        )

    @staticmethod
    def to_json_dict(board: Board) -> Dict[str, Any]:
        return {
            "snapshot_version": board.snapshot_version,
            "sprint_id": board.sprint_id,
            "columns": [
                {
                    "key": c.key,
                    "lane_id": c.lane.id,
                    "title": c.lane.title,
                    "status_value": c.lane.status_value,
                    "display_order": c.lane.display_order,
                    "color": c.lane.color,
                    "wip": asdict(c.wip),
                    "task_ids": [t.id for t in c.tasks],
                }
                for c in board.columns
            ],
            "rows": [
                {
                    "story_id": r.story.id,
                    "title": r.story.title,
                    "status": r.story.status,
                    "sprint_id": r.story.sprint_id,
                    "cells": {k: [t.id for t in v] for k, v in r.cells.items()},
                }
                for r in board.rows
            ],
            "orphaned_task_ids": [t.id for t in board.orphaned_tasks],
        }

    @staticmethod
    def to_raw_lines(board: Board) -> List[str]:
        lines = []
        for column in board.columns:
            flag = " OVER" if column.wip.over_limit else ""
            lines.append(f"{column.key}\t{column.lane.title}\t{wip_label(column.wip)}{flag}")
            for task in column.tasks:
                lines.append(f"  {task.id}: {task.title}")
        for task in board.orphaned_tasks:
            lines.append(f"orphaned\t{task.id}: {task.title} ({task.status})")
        return lines


def story_line(story: Story) -> str:
    sprint = story.sprint_id if story.sprint_id is not None else "-"
    return f"{story.id}: [{story.status}] {story.title} (sprint {sprint})"


def task_line(task: Task) -> str:
    return f"{task.id}: [{task.status}] {task.title} (story {task.story_id})"

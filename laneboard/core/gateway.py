"""
FILE: laneboard/core/gateway.py
PURPOSE: Async persistence gateway used by drag-and-drop and snapshot refresh
EXPORTS:
  - LocalGateway (coroutine facade over the repository)
DEPENDENCIES:
  - asyncio (stdlib)
  - laneboard.core.repository
  - laneboard.core.snapshot (load_snapshot)
  - laneboard.core.exceptions (PersistenceError)
NOTES:
  - Repository calls run in a worker thread so the event loop never blocks
  - Every failure surfaces as PersistenceError; callers re-fetch afterwards
  - Any object with the same coroutine methods can stand in (tests use fakes)
"""

import asyncio
import logging
import sqlite3
from typing import Optional

from . import repository
from .exceptions import LaneboardError, PersistenceError
from .models import Story, Task
from .snapshot import BoardSnapshot, load_snapshot


logger = logging.getLogger(__name__)


class LocalGateway:
    """Persistence collaborator backed by the local SQLite repository."""

    async def _call(self, operation: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except (sqlite3.Error, LaneboardError) as e:
            logger.error("%s failed: %s", operation, e)
            raise PersistenceError(operation, e) from e

    async def fetch_snapshot(
        self,
        project_id: int,
        sprint_id: Optional[int] = None,
        include_backlog: bool = False,
    ) -> BoardSnapshot:
        return await self._call(
            "fetch snapshot", load_snapshot, project_id, sprint_id, include_backlog
        )

    async def update_task_status(self, task_id: int, status: str) -> Task:
        return await self._call(
            "update task status", repository.update_task_status, task_id, status
        )

    async def update_story_status(
        self, story_id: int, status: str, sprint_id: Optional[int]
    ) -> Story:
        return await self._call(
            "update story status",
            repository.update_story_status,
            story_id,
            status,
            sprint_id,
        )

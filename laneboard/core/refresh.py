"""
FILE: laneboard/core/refresh.py
PURPOSE: Periodic and focus-triggered snapshot refresh
EXPORTS:
  - SnapshotRefresher
DEPENDENCIES:
  - asyncio (stdlib)
  - laneboard.core.exceptions (PersistenceError)
NOTES:
  - Refreshes every `interval` seconds (30 by default), on focus regain, and on demand
  - The timer runs as an asyncio task that stop() cancels on teardown
  - Background failures of any kind are logged and kept in last_error; the loop keeps going
  - stop() never re-raises what a cancelled task was doing
  - Explicit refresh_now() calls raise PersistenceError to the caller
  - Snapshots are replaced wholesale and handed to every subscriber
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set

from .constants import REFRESH_INTERVAL_SECONDS
from .exceptions import PersistenceError
from .snapshot import BoardSnapshot


logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[BoardSnapshot]]
Subscriber = Callable[[BoardSnapshot], None]


class SnapshotRefresher:
    """Keeps a board snapshot fresh and pushes each new one to subscribers."""

    def __init__(
        self,
        load: Loader,
        interval: float = REFRESH_INTERVAL_SECONDS,
        subscribers: Optional[List[Subscriber]] = None,
    ):
        self._load = load
        self.interval = interval
        self._subscribers: List[Subscriber] = list(subscribers or [])
        self._timer: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()
        self._lock = asyncio.Lock()
        self.latest: Optional[BoardSnapshot] = None
        self.last_error: Optional[Exception] = None
        self.refresh_count = 0

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self) -> None:
        """Start the periodic timer (no-op if already running)."""
        if self.running:
            return
        self._timer = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the timer and any pending focus refreshes."""
        tasks = list(self._pending)
        if self._timer is not None:
            tasks.append(self._timer)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._timer = None
        self._pending.clear()

    async def __aenter__(self) -> "SnapshotRefresher":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def refresh_now(self, reason: str = "explicit") -> BoardSnapshot:
        """
        Fetch a new snapshot right away.

        Raises:
            PersistenceError: If the fetch fails
        """
        async with self._lock:
            try:
                snapshot = await self._load()
            except PersistenceError as e:
                self.last_error = e
                raise

            self.latest = snapshot
            self.last_error = None
            self.refresh_count += 1
            logger.debug("Snapshot v%s loaded (%s)", snapshot.version, reason)

            for callback in self._subscribers:
                callback(snapshot)
            return snapshot

    async def _refresh_in_background(self, reason: str) -> None:
        try:
            await self.refresh_now(reason)
        except PersistenceError as e:
            logger.warning("Background refresh (%s) failed: %s", reason, e)
        except Exception as e:
            self.last_error = e
            logger.exception("Background refresh (%s) crashed", reason)

    def notify_focus(self) -> None:
        """Schedule a refresh because the board regained focus."""
        task = asyncio.get_running_loop().create_task(self._refresh_in_background("focus"))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self._refresh_in_background("timer")

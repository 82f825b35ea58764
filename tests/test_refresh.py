"""Tests for the periodic and focus-triggered snapshot refresher."""

# Path setup handled by conftest.py
import asyncio

import pytest

from laneboard.core.exceptions import PersistenceError
from laneboard.core.refresh import SnapshotRefresher
from laneboard.core.registry import LaneRegistry
from laneboard.core.snapshot import BoardSnapshot


class FakeLoader:
    """
    Returns a new snapshot per call and fails the calls listed in fail_on.

    Failures raise `error` when given, a PersistenceError otherwise.
    """

    def __init__(self, fail_on=(), error=None):
        self.calls = 0
        self.fail_on = set(fail_on)
        self.error = error

    async def __call__(self):
        self.calls += 1
        if self.calls in self.fail_on:
            raise self.error or PersistenceError("fetch snapshot", RuntimeError("offline"))
        return BoardSnapshot(
            project_id=1,
            sprint_id=None,
            registry=LaneRegistry.from_persisted(1, []),
            stories=(),
            tasks=(),
        )


def test_refresh_now_notifies_subscribers():
    received = []

    async def scenario():
        refresher = SnapshotRefresher(FakeLoader(), subscribers=[received.append])
        first = await refresher.refresh_now()
        second = await refresher.refresh_now()
        return refresher, first, second

    refresher, first, second = asyncio.run(scenario())

    assert received == [first, second]
    assert second.version > first.version
    assert refresher.latest is second
    assert refresher.refresh_count == 2


def test_refresh_failure_keeps_last_snapshot():
    async def scenario():
        refresher = SnapshotRefresher(FakeLoader(fail_on={2}))
        good = await refresher.refresh_now()
        with pytest.raises(PersistenceError):
            await refresher.refresh_now()
        return refresher, good

    refresher, good = asyncio.run(scenario())

    assert refresher.latest is good
    assert isinstance(refresher.last_error, PersistenceError)


def test_focus_triggers_refresh():
    async def scenario():
        arrived = asyncio.Event()
        refresher = SnapshotRefresher(FakeLoader(), interval=3600)
        refresher.subscribe(lambda snapshot: arrived.set())

        refresher.notify_focus()
        await asyncio.wait_for(arrived.wait(), timeout=2)
        await refresher.stop()
        return refresher

    refresher = asyncio.run(scenario())
    assert refresher.refresh_count == 1


def test_timer_survives_failed_refresh():
    """A failed background tick is logged and the next tick still runs."""
    async def scenario():
        arrived = asyncio.Event()
        loader = FakeLoader(fail_on={1})
        refresher = SnapshotRefresher(loader, interval=0.01)
        refresher.subscribe(lambda snapshot: arrived.set())

        async with refresher:
            assert refresher.running
            await asyncio.wait_for(arrived.wait(), timeout=2)

        return refresher, loader

    refresher, loader = asyncio.run(scenario())

    assert loader.calls >= 2
    assert refresher.latest is not None
    assert not refresher.running


def test_stop_cancels_timer():
    async def scenario():
        loader = FakeLoader()
        refresher = SnapshotRefresher(loader, interval=3600)
        refresher.start()
        refresher.start()
        await refresher.stop()
        return refresher, loader

    refresher, loader = asyncio.run(scenario())

    assert not refresher.running
    assert loader.calls == 0


def test_timer_survives_unexpected_error():
    """Errors the gateway doesn't wrap are logged and stored, never fatal."""
    async def scenario():
        arrived = asyncio.Event()
        loader = FakeLoader(fail_on={1}, error=OSError("disk gone"))
        refresher = SnapshotRefresher(loader, interval=0.01)
        refresher.subscribe(lambda snapshot: arrived.set())

        refresher.start()
        await asyncio.wait_for(arrived.wait(), timeout=2)
        assert refresher.running
        await refresher.stop()
        return refresher, loader

    refresher, loader = asyncio.run(scenario())

    assert loader.calls >= 2
    assert refresher.latest is not None
    assert not refresher.running


def test_stop_does_not_reraise_background_errors():
    async def scenario():
        loader = FakeLoader(fail_on=set(range(1, 1000)), error=OSError("disk gone"))
        refresher = SnapshotRefresher(loader, interval=0.01)
        refresher.start()
        refresher.notify_focus()
        while loader.calls < 3:
            await asyncio.sleep(0.01)
        await refresher.stop()
        return refresher

    refresher = asyncio.run(scenario())

    assert not refresher.running
    assert isinstance(refresher.last_error, OSError)
    assert refresher.latest is None

"""Tests for the membership watcher — snapshots and invalidation callbacks."""

from unittest.mock import AsyncMock

import pytest

from player.errors import NetworkError
from player.services.watcher import MembershipWatcher


@pytest.fixture
def watcher(ds):
    ds.add("f", "folder")
    ds.add("a", "document", parent="f")
    return MembershipWatcher(ds, interval_seconds=1)


class TestCheck:
    @pytest.mark.asyncio
    async def test_first_poll_only_snapshots(self, watcher):
        callback = AsyncMock()
        watcher.watch("f", callback)
        assert await watcher.check("f") is False
        callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unchanged_membership(self, watcher):
        callback = AsyncMock()
        watcher.watch("f", callback)
        await watcher.check("f")
        assert await watcher.check("f") is False
        callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_change_runs_callbacks(self, watcher, ds):
        first, second = AsyncMock(), AsyncMock()
        watcher.watch("f", first)
        watcher.watch("f", second)
        await watcher.check("f")

        ds.add("b", "document", parent="f")
        assert await watcher.check("f") is True
        first.assert_awaited_once()
        second.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fetch_failure_is_not_a_change(self, watcher, ds):
        callback = AsyncMock()
        watcher.watch("f", callback)
        await watcher.check("f")
        ds.fail("fetch_children", "f", NetworkError("down"))
        assert await watcher.check("f") is False
        callback.assert_not_awaited()


class TestWatchList:
    @pytest.mark.asyncio
    async def test_unwatch_last_callback_forgets_folder(self, watcher, ds):
        callback = AsyncMock()
        watcher.watch("f", callback)
        watcher.unwatch("f", callback)
        assert watcher.watched == []

        ds.add("b", "document", parent="f")
        assert await watcher.check_all() == 0

    @pytest.mark.asyncio
    async def test_check_all_counts_changes(self, watcher, ds):
        ds.add("g", "folder")
        watcher.watch("f", AsyncMock())
        watcher.watch("g", AsyncMock())
        await watcher.check_all()

        ds.add("b", "document", parent="f")
        assert await watcher.check_all() == 1

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_stop_others(self, watcher, ds):
        ds.add("g", "folder")
        watcher.watch("f", AsyncMock(side_effect=RuntimeError("boom")))
        other = AsyncMock()
        watcher.watch("g", other)
        await watcher.check_all()

        ds.add("b", "document", parent="f")
        ds.add("c", "document", parent="g")
        assert await watcher.check_all() == 1
        other.assert_awaited_once()


class TestScheduler:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, watcher):
        watcher.start()
        assert watcher._scheduler.running is True
        assert watcher._scheduler.get_job("poll_memberships") is not None
        await watcher.stop()

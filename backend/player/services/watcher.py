"""Membership watcher — polls folder children and signals invalidation."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from player.config import settings
from player.errors import PlayerError
from player.services.datasource import DataSource

logger = logging.getLogger(__name__)

Invalidation = Callable[[], Awaitable[object]]


class MembershipWatcher:
    """Replaces push updates with an explicit polling contract.

    Each watched folder keeps a snapshot of its child ids; when a poll sees
    a different membership every callback registered for that folder runs.
    The first poll of a folder only records the snapshot.
    """

    def __init__(self, data_source: DataSource, interval_seconds: int | None = None):
        self._ds = data_source
        self._interval = interval_seconds or settings.membership_poll_seconds
        self._callbacks: dict[str, list[Invalidation]] = {}
        self._snapshots: dict[str, tuple[str, ...]] = {}
        self._scheduler = AsyncIOScheduler(
            job_defaults={"coalesce": True, "max_instances": 1}
        )

    @property
    def watched(self) -> list[str]:
        return list(self._callbacks)

    def watch(self, parent_id: str, callback: Invalidation) -> None:
        self._callbacks.setdefault(parent_id, []).append(callback)

    def unwatch(self, parent_id: str, callback: Invalidation | None = None) -> None:
        callbacks = self._callbacks.get(parent_id)
        if callbacks is None:
            return
        if callback is not None and callback in callbacks:
            callbacks.remove(callback)
        if callback is None or not callbacks:
            self._callbacks.pop(parent_id, None)
            self._snapshots.pop(parent_id, None)

    def start(self) -> None:
        self._scheduler.add_job(
            self.check_all,
            "interval",
            seconds=self._interval,
            id="poll_memberships",
            name="Poll watched folder memberships",
        )
        self._scheduler.start()
        logger.info("Membership watcher started — polling every %ds", self._interval)

    async def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Membership watcher stopped")

    async def check_all(self) -> int:
        """Poll every watched folder. Returns how many were invalidated."""
        changed = 0
        for parent_id in list(self._callbacks):
            try:
                if await self.check(parent_id):
                    changed += 1
            except Exception as e:
                logger.error("Membership poll for %s failed: %s", parent_id, e)
        return changed

    async def check(self, parent_id: str) -> bool:
        try:
            children = await self._ds.fetch_children(parent_id)
        except PlayerError as e:
            logger.debug("Membership of %s unavailable: %s", parent_id, e)
            return False

        membership = tuple(c.id for c in children)
        previous = self._snapshots.get(parent_id)
        self._snapshots[parent_id] = membership
        if previous is None or previous == membership:
            return False

        logger.info("Membership of %s changed, invalidating", parent_id)
        for callback in list(self._callbacks.get(parent_id, [])):
            await callback()
        return True

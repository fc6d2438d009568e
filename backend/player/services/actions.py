"""Fire-and-forget telemetry for open/download events."""

from __future__ import annotations

import asyncio
import logging

from player.services.datasource import ActionKind, DataSource

logger = logging.getLogger(__name__)


class ActionReporter:
    """Posts item actions. Failures are logged and never surfaced."""

    def __init__(self, data_source: DataSource):
        self._ds = data_source
        self._pending: set[asyncio.Task] = set()

    async def report(self, node_id: str, kind: ActionKind | str) -> bool:
        """Post one action. Returns False if it could not be delivered."""
        try:
            await self._ds.post_action(node_id, ActionKind(kind))
            return True
        except Exception as e:
            logger.warning("Posting action %s for %s failed: %s", kind, node_id, e)
            return False

    def fire(self, node_id: str, kind: ActionKind | str) -> asyncio.Task:
        """Schedule ``report`` without waiting for it."""
        task = asyncio.create_task(self.report(node_id, kind))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for scheduled reports (shutdown)."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from player.config import settings

if TYPE_CHECKING:
    from player.services.actions import ActionReporter
    from player.services.datasource import DataSource
    from player.services.session import ViewRegistry
    from player.services.watcher import MembershipWatcher

logger = logging.getLogger(__name__)

_data_source: DataSource | None = None
_watcher: MembershipWatcher | None = None
_views: ViewRegistry | None = None
_action_reporter: ActionReporter | None = None


async def init_services() -> None:
    """Create and wire up all service singletons."""
    global _data_source, _watcher, _views, _action_reporter

    from player.services.actions import ActionReporter
    from player.services.session import ViewRegistry
    from player.services.watcher import MembershipWatcher

    if settings.is_dev_mode:
        from player.database import async_session, init_db
        from player.services.local_store import LocalDataSource

        await init_db()
        _data_source = LocalDataSource(async_session)
        logger.info("Dev mode — serving items from the local SQLite store")
    else:
        from player.services.remote_store import RemoteDataSource

        _data_source = RemoteDataSource()
        logger.info("Serving items from %s", settings.api_host)

    _watcher = MembershipWatcher(_data_source)
    _watcher.start()
    _views = ViewRegistry(_data_source, watcher=_watcher)
    _views.start()
    _action_reporter = ActionReporter(_data_source)


async def shutdown_services() -> None:
    """Unmount views, stop polling, flush telemetry."""
    global _watcher, _views, _action_reporter
    if _views is not None:
        _views.stop()
        _views.close_all()
        _views = None
    if _watcher:
        await _watcher.stop()
        _watcher = None
    if _action_reporter:
        await _action_reporter.drain()
        _action_reporter = None


def get_data_source() -> DataSource:
    if _data_source is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _data_source


def get_view_registry() -> ViewRegistry:
    if _views is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _views


def get_action_reporter() -> ActionReporter:
    if _action_reporter is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _action_reporter

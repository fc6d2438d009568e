"""View sessions — the per-view owner of guard, loaders and navigation state."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from player.config import settings
from player.schemas.navigation import NavigationRoute, NavigationView
from player.schemas.render import Placeholder, RenderOutcome
from player.services.datasource import DataSource
from player.services.navigation import NavigationSync
from player.services.pagination import PaginatedChildrenLoader
from player.services.renderer import TreeRenderer
from player.services.root_guard import GuardState, RootChangeGuard
from player.services.watcher import MembershipWatcher

logger = logging.getLogger(__name__)


class ViewSession:
    """One mounted view: a main tree pane plus its navigation drawer."""

    def __init__(
        self,
        data_source: DataSource,
        watcher: MembershipWatcher | None = None,
        page_size: int | None = None,
        view_id: str | None = None,
    ):
        self.id = view_id or str(uuid.uuid4())
        self._ds = data_source
        self._watcher = watcher
        self.guard = RootChangeGuard()
        self.renderer = TreeRenderer(
            data_source,
            page_size=page_size,
            on_loader_created=self._watch_loader,
            on_loader_closed=self._unwatch_loader,
        )
        self.navigation = NavigationSync(data_source)
        self.root_id: str | None = None
        self.show_pinned_only = False
        self.routes: list[NavigationRoute] = []
        self.closed = False
        self.last_seen = time.monotonic()

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    def _watch_loader(self, loader: PaginatedChildrenLoader) -> None:
        if self._watcher is not None:
            self._watcher.watch(loader.parent_id, loader.invalidate)

    def _unwatch_loader(self, loader: PaginatedChildrenLoader) -> None:
        if self._watcher is not None:
            self._watcher.unwatch(loader.parent_id, loader.invalidate)

    async def display(self, root_id: str, show_pinned_only: bool = False) -> AsyncIterator[RenderOutcome | None]:
        """Yield the frames of the main pane while it moves to ``root_id``."""
        if self.guard.request(root_id) == GuardState.TRANSITIONING:
            # the previous root's pagination state must not outlive it
            self.renderer.close()
            yield Placeholder(is_children=False, max_height=settings.screen_max_height)

        self.root_id = root_id
        self.show_pinned_only = show_pinned_only
        node, fallback = await self.renderer.resolve(root_id)
        if node is None:
            yield fallback
            return
        self.guard.observe_root(node)
        yield await self.renderer.render_node(node, show_pinned_only=show_pinned_only)

    async def refresh(self) -> RenderOutcome | None:
        """Re-render the current root from already loaded state."""
        if self.root_id is None:
            return None
        if not self.guard.may_render:
            return Placeholder(is_children=False, max_height=settings.screen_max_height)
        return await self.renderer.render(self.root_id, show_pinned_only=self.show_pinned_only)

    async def load_more(self, folder_id: str, show_pinned_only: bool = False) -> bool:
        loader = self.renderer.get_loader(folder_id, show_pinned_only)
        if loader is None:
            return False
        return await loader.load_more()

    async def sentinel_visible(self, folder_id: str, show_pinned_only: bool = False) -> bool:
        loader = self.renderer.get_loader(folder_id, show_pinned_only)
        if loader is None:
            return False
        return await loader.on_sentinel_visible()

    async def invalidate(self, folder_id: str) -> int:
        """Membership of ``folder_id`` changed: reset all its loaders."""
        loaders = self.renderer.loaders_for(folder_id)
        for loader in loaders:
            self.renderer.forget_markers([n.id for n in loader.items])
            await loader.invalidate()
        return len(loaders)

    async def sync_navigation(self, root_id: str | None) -> AsyncIterator[NavigationView]:
        async for view in self.navigation.sync(root_id):
            yield view

    def select(self, item_id: str) -> NavigationRoute:
        route = self.navigation.select(item_id)
        self.routes.append(route)
        return route

    def close(self) -> None:
        """Unmount: drop pagination and navigation state."""
        if self.closed:
            return
        self.renderer.close()
        self.navigation.close()
        self.closed = True
        logger.debug("View %s closed", self.id)


class ViewRegistry:
    """All mounted views of this process.

    Views not touched for ``idle_seconds`` are unmounted by a periodic
    sweep, so a client that disappears without unmounting does not keep
    its loaders registered with the watcher.
    """

    def __init__(
        self,
        data_source: DataSource,
        watcher: MembershipWatcher | None = None,
        page_size: int | None = None,
        idle_seconds: int | None = None,
    ):
        self._ds = data_source
        self._watcher = watcher
        self._page_size = page_size
        self._idle_seconds = idle_seconds or settings.view_idle_seconds
        self._views: dict[str, ViewSession] = {}
        self._scheduler = AsyncIOScheduler(
            job_defaults={"coalesce": True, "max_instances": 1}
        )

    def __len__(self) -> int:
        return len(self._views)

    def create(self) -> ViewSession:
        view = ViewSession(self._ds, watcher=self._watcher, page_size=self._page_size)
        self._views[view.id] = view
        logger.info("View %s mounted", view.id)
        return view

    def get(self, view_id: str) -> ViewSession | None:
        return self._views.get(view_id)

    def close(self, view_id: str) -> bool:
        view = self._views.pop(view_id, None)
        if view is None:
            return False
        view.close()
        logger.info("View %s unmounted", view_id)
        return True

    def close_all(self) -> None:
        for view_id in list(self._views):
            self.close(view_id)

    def evict_idle(self, now: float | None = None) -> int:
        """Unmount views idle for longer than ``idle_seconds``."""
        now = time.monotonic() if now is None else now
        idle = [
            view_id for view_id, view in self._views.items()
            if now - view.last_seen > self._idle_seconds
        ]
        for view_id in idle:
            logger.info("View %s idle, unmounting", view_id)
            self.close(view_id)
        return len(idle)

    def start(self) -> None:
        self._scheduler.add_job(
            self.evict_idle,
            "interval",
            seconds=settings.view_sweep_seconds,
            id="evict_idle_views",
            name="Unmount idle views",
        )
        self._scheduler.start()
        logger.info("Idle view sweep started, timeout %ds", self._idle_seconds)

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

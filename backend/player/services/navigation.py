"""Navigation sync — mirrors the root and its visible descendants."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from enum import Enum

from player.errors import UNEXPECTED_ERROR_MESSAGE, AccessDenied, PlayerError
from player.schemas.navigation import NavigationRoute, NavigationView
from player.services.datasource import DataSource
from player.services.root_guard import GuardState, RootChangeGuard
from player.services.visibility import filter_visible

logger = logging.getLogger(__name__)


class NavPhase(str, Enum):
    IDLE = "idle"
    AWAITING_ROOT = "awaiting_root"
    AWAITING_DESCENDANTS = "awaiting_descendants"
    READY = "ready"
    ERROR = "error"


@dataclass
class NavigationState:
    root_id: str | None = None
    previous_root_id: str | None = None
    phase: NavPhase = NavPhase.IDLE


NOTHING = NavigationView(kind="nothing")
LOADING = NavigationView(kind="loading")


class NavigationSync:
    """Feeds the navigation widget for one view.

    ``sync`` yields every frame the widget should show, in order. A sync
    superseded by a newer one (or by ``close``) stops yielding.
    """

    def __init__(
        self,
        data_source: DataSource,
        on_select: Callable[[NavigationRoute], None] | None = None,
    ):
        self._ds = data_source
        self._on_select = on_select
        self._guard = RootChangeGuard()
        self.state = NavigationState()
        self._generation = 0
        self._closed = False

    @property
    def guard(self) -> RootChangeGuard:
        return self._guard

    def close(self) -> None:
        self._closed = True
        self._generation += 1
        self.state = NavigationState()

    def _current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def sync(self, root_id: str | None) -> AsyncIterator[NavigationView]:
        self._generation += 1
        generation = self._generation

        if root_id is None:
            self.state = NavigationState(previous_root_id=self.state.root_id)
            yield NOTHING
            return

        self.state = NavigationState(
            root_id=root_id,
            previous_root_id=self.state.root_id,
            phase=NavPhase.AWAITING_ROOT,
        )
        if self._guard.request(root_id) == GuardState.TRANSITIONING:
            yield LOADING

        try:
            root = await self._ds.fetch_node(root_id)
        except AccessDenied:
            # expected when the viewer lacks permission on a linked node
            if self._current(generation):
                self.state.phase = NavPhase.ERROR
                yield NOTHING
            return
        except PlayerError as e:
            if self._current(generation):
                logger.warning("Navigation root %s failed: %s", root_id, e)
                self.state.phase = NavPhase.ERROR
                yield NavigationView(kind="error", message=UNEXPECTED_ERROR_MESSAGE)
            return
        if not self._current(generation):
            return

        self._guard.observe_root(root)
        self.state.phase = NavPhase.AWAITING_DESCENDANTS
        yield LOADING

        try:
            descendants = await self._ds.fetch_descendants(root_id)
            markers = await self._ds.fetch_markers([n.id for n in descendants])
        except PlayerError as e:
            if self._current(generation):
                logger.warning("Navigation descendants of %s failed: %s", root_id, e)
                self.state.phase = NavPhase.ERROR
                yield NavigationView(kind="error", message=UNEXPECTED_ERROR_MESSAGE)
            return
        if not self._current(generation):
            return

        self.state.phase = NavPhase.READY
        # the root is never filtered: the viewer is already inside it
        yield NavigationView(
            kind="tree",
            root=root,
            items=filter_visible(descendants, markers),
        )

    def select(self, item_id: str) -> NavigationRoute:
        """A navigation item was selected; hand the route to the router."""
        if self.state.root_id is None:
            raise ValueError("No navigation root is displayed")
        route = NavigationRoute(root_id=self.state.root_id, item_id=item_id)
        if self._on_select:
            self._on_select(route)
        return route

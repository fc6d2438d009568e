"""Paginated children loader — per-folder infinite-scroll state machine."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from player.config import settings
from player.errors import PlayerError
from player.schemas.node import Node, Page
from player.schemas.render import LoadMoreControl
from player.services.datasource import DataSource

logger = logging.getLogger(__name__)


class LoaderState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    PARTIALLY_LOADED = "partially_loaded"
    EXHAUSTED = "exhausted"


VALID_TRANSITIONS: dict[LoaderState, set[LoaderState]] = {
    LoaderState.EMPTY: {LoaderState.LOADING},
    # EMPTY from LOADING only when the first page failed
    LoaderState.LOADING: {LoaderState.PARTIALLY_LOADED, LoaderState.EXHAUSTED, LoaderState.EMPTY},
    LoaderState.PARTIALLY_LOADED: {LoaderState.LOADING},
    LoaderState.EXHAUSTED: set(),
}


def pinned_partition(show_pinned_only: bool) -> Callable[[Node], bool]:
    """Predicate keeping nodes whose pinned flag equals ``show_pinned_only``."""
    return lambda node: node.settings.is_pinned == show_pinned_only


class PaginatedChildrenLoader:
    """Accumulates pages of one folder's children.

    At most one fetch is in flight; ``invalidate`` supersedes it and
    ``close`` discards it. Results are matched against a generation counter
    on arrival.
    """

    def __init__(
        self,
        data_source: DataSource,
        parent_id: str,
        page_size: int | None = None,
        content_filter: Callable[[Node], bool] | None = None,
        paginated: bool = True,
    ):
        self._ds = data_source
        self.parent_id = parent_id
        self.page_size = page_size or settings.page_size
        self._filter = content_filter
        self.paginated = paginated
        self._state = LoaderState.EMPTY
        self._pages: list[Page] = []
        self._generation = 0
        self._closed = False
        self.last_error: PlayerError | None = None

    @property
    def state(self) -> LoaderState:
        return self._state

    @property
    def pages(self) -> list[Page]:
        return list(self._pages)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_next_page(self) -> bool:
        if not self._pages:
            return False
        return self._pages[-1].has_next_page

    @property
    def is_fetching_next_page(self) -> bool:
        return self._state == LoaderState.LOADING

    @property
    def items(self) -> list[Node]:
        """Flattened page contents in page order, each node once, filtered."""
        seen: set[str] = set()
        out: list[Node] = []
        for page in self._pages:
            for node in page.data:
                if node.id in seen:
                    continue
                seen.add(node.id)
                if self._filter is None or self._filter(node):
                    out.append(node)
        return out

    def load_more_control(self) -> LoadMoreControl:
        enabled = self.has_next_page and not self.is_fetching_next_page
        return LoadMoreControl(visible=enabled, disabled=not enabled)

    def _transition(self, new_state: LoaderState) -> bool:
        if new_state == self._state:
            return True
        if new_state not in VALID_TRANSITIONS[self._state]:
            logger.warning(
                "Invalid loader transition for %s: %s -> %s",
                self.parent_id, self._state, new_state,
            )
            return False
        self._state = new_state
        return True

    async def start(self) -> bool:
        """Mount: request page 0. No-op unless the loader is empty."""
        if self._state != LoaderState.EMPTY:
            return False
        return await self._fetch_page(0)

    async def fetch_next_page(self) -> bool:
        """Request the next page. Returns True if a fetch was issued."""
        if self._closed:
            return False
        if self._state == LoaderState.EMPTY:
            return await self.start()
        if self._state != LoaderState.PARTIALLY_LOADED or not self.has_next_page:
            logger.debug("fetch_next_page ignored for %s in state %s", self.parent_id, self._state)
            return False
        return await self._fetch_page(self._pages[-1].page_number + 1)

    async def on_sentinel_visible(self) -> bool:
        """The sentinel element below the last child entered the viewport."""
        return await self.fetch_next_page()

    async def load_more(self) -> bool:
        """Explicit "load more" action."""
        return await self.fetch_next_page()

    async def invalidate(self) -> bool:
        """Child membership changed upstream: drop every page, restart at 0."""
        if self._closed:
            return False
        logger.info("Children of %s invalidated, reloading from page 0", self.parent_id)
        self._generation += 1
        self._pages = []
        self.last_error = None
        self._state = LoaderState.EMPTY
        return await self._fetch_page(0)

    def close(self) -> None:
        """Unmount: later results are discarded."""
        self._closed = True
        self._generation += 1
        self._pages = []

    async def _fetch_page(self, page_number: int) -> bool:
        if not self._transition(LoaderState.LOADING):
            return False
        generation = self._generation
        previous = LoaderState.PARTIALLY_LOADED if self._pages else LoaderState.EMPTY
        try:
            page = await self._request(page_number)
        except PlayerError as e:
            if generation != self._generation:
                return True
            logger.warning(
                "Fetching page %d of %s failed: %s", page_number, self.parent_id, e,
            )
            self.last_error = e
            self._transition(previous)
            return True
        except BaseException:
            # cancelled or malformed: never stay in LOADING
            if generation == self._generation:
                self._transition(previous)
            raise

        if generation != self._generation:
            logger.debug("Discarding stale page %d of %s", page_number, self.parent_id)
            return True

        self._apply(page)
        return True

    async def _request(self, page_number: int) -> Page:
        if not self.paginated:
            children = await self._ds.fetch_children(self.parent_id)
            return Page(page_number=0, data=children, has_next_page=False)
        return await self._ds.fetch_children_page(self.parent_id, page_number, self.page_size)

    def _apply(self, page: Page) -> None:
        known = {p.page_number for p in self._pages}
        if page.page_number in known:
            logger.warning(
                "Duplicate page %d for %s ignored", page.page_number, self.parent_id,
            )
        else:
            self._pages.append(page)
            self._pages.sort(key=lambda p: p.page_number)
        self.last_error = None
        if self.has_next_page:
            self._transition(LoaderState.PARTIALLY_LOADED)
        else:
            self._transition(LoaderState.EXHAUSTED)

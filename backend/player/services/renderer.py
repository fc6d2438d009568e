"""Tree renderer — resolve, filter, dispatch, and expand the root folder."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

from player.config import settings
from player.errors import UNEXPECTED_ERROR_MESSAGE, AccessDenied, PlayerError
from player.schemas.node import Marker, Node
from player.schemas.render import ErrorAlert, FolderContent, Placeholder, RenderOutcome
from player.services.datasource import DataSource
from player.services.dispatch import RenderContext, TypeDispatcher
from player.services.pagination import PaginatedChildrenLoader, pinned_partition
from player.services.visibility import Readiness, visibility

logger = logging.getLogger(__name__)

LoaderHook = Callable[[PaginatedChildrenLoader], None]


class TreeRenderer:
    """Renders one view's tree.

    Only the root folder expands its children inline; a folder met as a
    child becomes a folder card. Owns the loaders of the folders it
    expands, keyed by ``(folder_id, show_pinned_only)``.
    """

    def __init__(
        self,
        data_source: DataSource,
        dispatcher: TypeDispatcher | None = None,
        page_size: int | None = None,
        on_loader_created: LoaderHook | None = None,
        on_loader_closed: LoaderHook | None = None,
    ):
        self._ds = data_source
        self._dispatcher = dispatcher or TypeDispatcher()
        self._page_size = page_size or settings.page_size
        self._loaders: dict[tuple[str, bool], PaginatedChildrenLoader] = {}
        self._markers: dict[str, list[Marker]] = {}
        self._on_loader_created = on_loader_created
        self._on_loader_closed = on_loader_closed

    # --- loaders -------------------------------------------------------

    def loader_for(self, folder_id: str, show_pinned_only: bool = False) -> PaginatedChildrenLoader:
        key = (folder_id, show_pinned_only)
        loader = self._loaders.get(key)
        if loader is None:
            loader = PaginatedChildrenLoader(
                self._ds,
                folder_id,
                page_size=self._page_size,
                content_filter=pinned_partition(show_pinned_only),
                # the pinned predicate cannot be pushed down to pages
                paginated=not show_pinned_only,
            )
            self._loaders[key] = loader
            if self._on_loader_created:
                self._on_loader_created(loader)
        return loader

    def get_loader(self, folder_id: str, show_pinned_only: bool = False) -> PaginatedChildrenLoader | None:
        return self._loaders.get((folder_id, show_pinned_only))

    def loaders_for(self, folder_id: str) -> list[PaginatedChildrenLoader]:
        return [l for (fid, _), l in self._loaders.items() if fid == folder_id]

    def close(self) -> None:
        """Tear down every loader and forget cached markers."""
        for loader in self._loaders.values():
            loader.close()
            if self._on_loader_closed:
                self._on_loader_closed(loader)
        self._loaders.clear()
        self._markers.clear()

    # --- rendering -----------------------------------------------------

    async def resolve(self, node_id: str) -> tuple[Node | None, RenderOutcome | None]:
        """Fetch a node. Returns ``(node, None)`` or ``(None, fallback)``."""
        try:
            return await self._ds.fetch_node(node_id), None
        except AccessDenied:
            logger.debug("Access denied on %s, rendering nothing", node_id)
            return None, None
        except PlayerError as e:
            logger.warning("Fetching node %s failed: %s", node_id, e)
            return None, ErrorAlert(node_id=node_id, message=UNEXPECTED_ERROR_MESSAGE)

    async def render(
        self,
        node_id: str,
        is_children: bool = False,
        show_pinned_only: bool = False,
    ) -> RenderOutcome | None:
        node, fallback = await self.resolve(node_id)
        if node is None:
            return fallback
        return await self.render_node(node, is_children=is_children, show_pinned_only=show_pinned_only)

    async def render_node(
        self,
        node: Node,
        is_children: bool = False,
        show_pinned_only: bool = False,
        chain: frozenset[str] = frozenset(),
    ) -> RenderOutcome | None:
        if node.is_folder and not is_children:
            return await self._render_folder(node, show_pinned_only)

        markers = await self._markers_for([node])
        return await self._render_visible(node, markers.get(node.id), chain)

    async def _render_folder(self, folder: Node, show_pinned_only: bool) -> FolderContent:
        loader = self.loader_for(folder.id, show_pinned_only)
        await loader.start()
        children = loader.items
        markers = await self._markers_for(children)

        rendered: list[RenderOutcome] = []
        for child in children:
            outcome = await self._render_child(child, markers.get(child.id))
            if outcome is not None:
                rendered.append(outcome)

        if show_pinned_only:
            return FolderContent(node_id=folder.id, children=rendered)
        return FolderContent(
            node_id=folder.id,
            name=folder.title,
            description=folder.description,
            children=rendered,
            load_more=loader.load_more_control(),
        )

    async def _render_child(self, child: Node, markers: Sequence[Marker] | None) -> RenderOutcome | None:
        """Render boundary: a failing child never affects its siblings."""
        try:
            return await self._render_visible(child, markers, frozenset())
        except Exception:
            logger.exception("Rendering child %s failed", child.id)
            return ErrorAlert(node_id=child.id, message=UNEXPECTED_ERROR_MESSAGE)

    async def _render_visible(
        self,
        node: Node,
        markers: Sequence[Marker] | None,
        chain: frozenset[str],
    ) -> RenderOutcome | None:
        readiness = visibility(node, markers)
        if readiness == Readiness.HIDDEN:
            return None
        if readiness == Readiness.UNKNOWN:
            return Placeholder(node_type=node.type, is_children=True, max_height=settings.screen_max_height)

        ctx = RenderContext(
            data_source=self._ds,
            render_target=self._target_renderer(chain | {node.id}),
        )
        return await self._dispatcher.render(node, ctx)

    def _target_renderer(self, chain: frozenset[str]) -> Callable[[str, Node], Awaitable[RenderOutcome | None]]:
        async def render_target(target_id: str, shortcut: Node) -> RenderOutcome | None:
            if target_id in chain:
                logger.error(
                    "Shortcut cycle detected at %s -> %s, not rendering", shortcut.id, target_id,
                )
                return None
            try:
                target = await self._ds.fetch_node(target_id)
            except AccessDenied:
                # routine on shared content, the viewer may not see the target
                return None
            except PlayerError as e:
                logger.warning("Shortcut %s target %s failed: %s", shortcut.id, target_id, e)
                return ErrorAlert(node_id=target_id, message=UNEXPECTED_ERROR_MESSAGE)
            return await self.render_node(target, is_children=True, chain=chain)

        return render_target

    async def _markers_for(self, nodes: Sequence[Node]) -> dict[str, list[Marker] | None]:
        """Markers per node id; None for nodes whose markers could not load."""
        missing = [n.id for n in nodes if n.id not in self._markers]
        if missing:
            try:
                fetched = await self._ds.fetch_markers(missing)
            except PlayerError as e:
                logger.warning("Fetching markers for %d nodes failed: %s", len(missing), e)
            else:
                for node_id in missing:
                    self._markers[node_id] = list(fetched.get(node_id, []))
        return {n.id: self._markers.get(n.id) for n in nodes}

    def forget_markers(self, node_ids: Sequence[str] | None = None) -> None:
        if node_ids is None:
            self._markers.clear()
            return
        for node_id in node_ids:
            self._markers.pop(node_id, None)

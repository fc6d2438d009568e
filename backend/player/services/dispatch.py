"""Type dispatcher — one rendering strategy per node type."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from player.config import settings
from player.errors import UNEXPECTED_ERROR_MESSAGE, PlayerError
from player.schemas.node import Node, NodeType
from player.schemas.render import (
    AppFrame,
    CollabDocEmbed,
    Collapsible,
    DocumentView,
    ErrorAlert,
    FileView,
    FolderCard,
    LinkView,
    RenderOutcome,
    WidgetEmbed,
)
from player.services.datasource import DataSource
from player.utils.paths import build_main_path
from player.utils.selectors import (
    build_app_id,
    build_collapsible_id,
    build_document_id,
    build_file_id,
    build_folder_button_id,
    build_link_item_id,
)

logger = logging.getLogger(__name__)

ETHERPAD_OPTIONS = {
    "showLineNumbers": False,
    "showControls": False,
    "showChat": False,
    "noColors": True,
}


@dataclass
class RenderContext:
    """What strategies may use besides the node itself."""
    data_source: DataSource
    # renders a shortcut target as a child; handles cycles and access errors
    render_target: Callable[[str, Node], Awaitable[RenderOutcome | None]]


Strategy = Callable[[Node, RenderContext], Awaitable["RenderOutcome | None"]]


def _error(node: Node) -> ErrorAlert:
    return ErrorAlert(node_id=node.id, message=UNEXPECTED_ERROR_MESSAGE)


async def render_folder_card(node: Node, ctx: RenderContext) -> RenderOutcome:
    return FolderCard(
        node_id=node.id,
        element_id=build_folder_button_id(node.id),
        name=node.name,
        description=node.description or "",
        to=build_main_path(node.id),
    )


async def render_file(node: Node, ctx: RenderContext) -> RenderOutcome:
    try:
        url = await ctx.data_source.fetch_file_url(node.id)
    except PlayerError as e:
        logger.warning("File content for %s unavailable: %s", node.id, e)
        return _error(node)
    return FileView(
        node_id=node.id,
        element_id=build_file_id(node.id),
        name=node.title,
        url=url,
        max_height=settings.screen_max_height,
        pdf_viewer_link=settings.pdf_viewer_link,
        show_collapse=node.settings.is_collapsible,
    )


async def render_link(node: Node, ctx: RenderContext) -> RenderOutcome:
    return LinkView(
        node_id=node.id,
        element_id=build_link_item_id(node.id),
        name=node.title,
        url=node.extra_value("url"),
        height=settings.screen_max_height,
        show_button=node.settings.show_link_button,
        show_iframe=node.settings.show_link_iframe,
        show_collapse=node.settings.is_collapsible,
    )


async def render_document(node: Node, ctx: RenderContext) -> RenderOutcome:
    return DocumentView(
        node_id=node.id,
        element_id=build_document_id(node.id),
        name=node.title,
        content=node.extra_value("content") or "",
        show_title=node.settings.show_title,
        show_collapse=node.settings.is_collapsible,
    )


async def render_app(node: Node, ctx: RenderContext) -> RenderOutcome:
    is_resizable = node.settings.is_resizable
    return AppFrame(
        node_id=node.id,
        frame_id=build_app_id(node.id),
        name=node.title,
        url=node.extra_value("url"),
        height=settings.screen_max_height,
        is_resizable=is_resizable if is_resizable is not None else settings.default_resizable,
        context={
            "apiHost": settings.api_host,
            "settings": node.settings.model_dump(by_alias=True),
            "lang": node.lang or settings.default_lang,
            "permission": "read",
            "context": "player",
            "itemId": node.id,
        },
        show_collapse=node.settings.is_collapsible,
    )


async def render_h5p(node: Node, ctx: RenderContext) -> RenderOutcome:
    content_id = node.extra_value("contentId")
    if not content_id:
        logger.warning("H5P node %s has no contentId", node.id)
        return _error(node)
    return WidgetEmbed(
        node_id=node.id,
        name=node.title,
        content_id=str(content_id),
        integration_url=settings.h5p_integration_url,
        show_collapse=node.settings.is_collapsible,
    )


async def render_etherpad(node: Node, ctx: RenderContext) -> RenderOutcome:
    try:
        pad_url = await ctx.data_source.fetch_etherpad_url(node.id)
    except PlayerError as e:
        logger.warning("Etherpad for %s unavailable: %s", node.id, e)
        return _error(node)
    if not pad_url:
        return _error(node)
    return CollabDocEmbed(node_id=node.id, pad_url=pad_url, options=dict(ETHERPAD_OPTIONS))


async def render_shortcut(node: Node, ctx: RenderContext) -> RenderOutcome | None:
    target = node.extra_value("target")
    if not target:
        logger.error("Shortcut %s has no target", node.id)
        return None
    content = await ctx.render_target(target, node)
    if content is None or not node.settings.is_collapsible:
        return content
    return Collapsible(
        element_id=build_collapsible_id(node.id),
        name=node.title,
        content=content,
    )


STRATEGIES: dict[NodeType, Strategy] = {
    NodeType.FOLDER: render_folder_card,
    NodeType.LOCAL_FILE: render_file,
    NodeType.S3_FILE: render_file,
    NodeType.LINK: render_link,
    NodeType.DOCUMENT: render_document,
    NodeType.APP: render_app,
    NodeType.H5P: render_h5p,
    NodeType.ETHERPAD: render_etherpad,
    NodeType.SHORTCUT: render_shortcut,
}


class TypeDispatcher:
    """Maps a node's type to its strategy. Unknown types render nothing."""

    def __init__(self, strategies: dict[NodeType, Strategy] | None = None):
        self._strategies = dict(strategies or STRATEGIES)

    def strategy_for(self, node: Node) -> Strategy | None:
        node_type = node.node_type
        if node_type is None:
            return None
        return self._strategies.get(node_type)

    async def render(self, node: Node, ctx: RenderContext) -> RenderOutcome | None:
        strategy = self.strategy_for(node)
        if strategy is None:
            logger.error("The type %r of node %s is not defined", node.type, node.id)
            return None
        return await strategy(node, ctx)

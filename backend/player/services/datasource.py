"""Contract between the tree core and the item store."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol

from player.schemas.node import Marker, Node, Page


class ActionKind(str, Enum):
    ITEM_DOWNLOAD = "item-download"
    LINK_OPEN = "link-open"


class DataSource(Protocol):
    """Async item store.

    Every method may raise ``NotFound``, ``AccessDenied`` or ``NetworkError``
    from ``player.errors``; nothing else is expected to escape.
    """

    async def fetch_node(self, node_id: str) -> Node: ...

    async def fetch_children(self, parent_id: str) -> list[Node]: ...

    async def fetch_children_page(
        self, parent_id: str, page_number: int, page_size: int
    ) -> Page: ...

    async def fetch_descendants(self, root_id: str) -> list[Node]: ...

    async def fetch_markers(self, node_ids: Sequence[str]) -> dict[str, list[Marker]]: ...

    async def post_action(self, node_id: str, action_kind: ActionKind) -> None: ...

    async def fetch_file_url(self, node_id: str) -> str: ...

    async def fetch_etherpad_url(self, node_id: str) -> str: ...

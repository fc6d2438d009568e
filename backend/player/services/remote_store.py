"""Item store REST client."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from player.config import settings
from player.errors import AccessDenied, NetworkError, NotFound
from player.schemas.node import Marker, Node, Page
from player.services.datasource import ActionKind

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse(what: str, node_id: str | None, build: Callable[[], T]) -> T:
    """Run a response parser; shape errors become ``NetworkError``."""
    try:
        return build()
    except (ValidationError, TypeError, AttributeError) as e:
        raise NetworkError(f"Malformed {what} response: {e}", node_id=node_id) from e


class RemoteDataSource:
    """Reads nodes, pages and markers from the item store over HTTP.

    403 becomes ``AccessDenied``, 404 ``NotFound``; every other status and
    every transport failure becomes ``NetworkError``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.api_host).rstrip("/")
        self._timeout = timeout or settings.request_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, node_id: str | None = None, **kwargs) -> Any:
        try:
            async with self._client() as client:
                resp = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {path}: {e}", node_id=node_id) from e

        if resp.status_code == 403:
            raise AccessDenied(f"{method} {path}: forbidden", node_id=node_id)
        if resp.status_code == 404:
            raise NotFound(f"{method} {path}: not found", node_id=node_id)
        if resp.status_code >= 400:
            raise NetworkError(f"{method} {path}: HTTP {resp.status_code}", node_id=node_id)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise NetworkError(f"{method} {path}: invalid JSON", node_id=node_id) from e

    async def fetch_node(self, node_id: str) -> Node:
        data = await self._request("GET", f"/items/{node_id}", node_id=node_id)
        return _parse("node", node_id, lambda: Node.model_validate(data))

    async def fetch_children(self, parent_id: str) -> list[Node]:
        data = await self._request("GET", f"/items/{parent_id}/children", node_id=parent_id)
        return _parse("children", parent_id, lambda: [Node.model_validate(d) for d in data or []])

    async def fetch_children_page(self, parent_id: str, page_number: int, page_size: int) -> Page:
        data = await self._request(
            "GET",
            f"/items/{parent_id}/children/paginated",
            node_id=parent_id,
            params={"page": page_number, "pageSize": page_size},
        )
        page = _parse("page", parent_id, lambda: Page.model_validate(data))
        if page.page_number != page_number:
            logger.warning(
                "Asked page %d of %s, store answered page %d",
                page_number, parent_id, page.page_number,
            )
        return page

    async def fetch_descendants(self, root_id: str) -> list[Node]:
        data = await self._request("GET", f"/items/{root_id}/descendants", node_id=root_id)
        return _parse("descendants", root_id, lambda: [Node.model_validate(d) for d in data or []])

    async def fetch_markers(self, node_ids: Sequence[str]) -> dict[str, list[Marker]]:
        if not node_ids:
            return {}
        data = await self._request("GET", "/items/tags", params=[("id", i) for i in node_ids])
        return _parse("tags", None, lambda: {
            node_id: [Marker.model_validate(m) for m in markers or []]
            for node_id, markers in ((data or {}).get("data") or {}).items()
        })

    async def post_action(self, node_id: str, action_kind: ActionKind) -> None:
        await self._request(
            "POST",
            f"/items/{node_id}/actions",
            node_id=node_id,
            json={"type": ActionKind(action_kind).value},
        )

    async def fetch_file_url(self, node_id: str) -> str:
        data = await self._request(
            "GET", f"/items/{node_id}/content", node_id=node_id, params={"replyUrl": "true"},
        )
        url = _parse("content", node_id, lambda: (data or {}).get("url"))
        if not url:
            raise NetworkError(f"No content URL for {node_id}", node_id=node_id)
        return url

    async def fetch_etherpad_url(self, node_id: str) -> str:
        data = await self._request(
            "GET", f"/items/etherpad/view/{node_id}", node_id=node_id, params={"mode": "read"},
        )
        return _parse("etherpad", node_id, lambda: (data or {}).get("padUrl")) or ""

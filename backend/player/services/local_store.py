"""SQLite-backed item store used in dev mode."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from player.config import settings
from player.errors import NotFound
from player.models.action import ActionRecord
from player.models.item import ItemRecord
from player.models.marker import MarkerRecord
from player.schemas.node import Marker, Node, Page
from player.services.datasource import ActionKind

logger = logging.getLogger(__name__)


def _to_node(record: ItemRecord) -> Node:
    return Node(
        id=record.id,
        type=record.type,
        name=record.name,
        display_name=record.display_name,
        description=record.description,
        lang=record.lang,
        path=record.path,
        settings=record.settings or {},
        extra=record.extra or {},
    )


class LocalDataSource:
    """Same contract as the remote store, served from the ``items`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._sessions = session_factory

    async def _get(self, db: AsyncSession, node_id: str) -> ItemRecord:
        record = await db.get(ItemRecord, node_id)
        if record is None:
            raise NotFound(f"Item {node_id} not found", node_id=node_id)
        return record

    async def fetch_node(self, node_id: str) -> Node:
        async with self._sessions() as db:
            return _to_node(await self._get(db, node_id))

    def _children_query(self, parent_id: str):
        return (
            select(ItemRecord)
            .where(ItemRecord.parent_id == parent_id)
            .order_by(ItemRecord.position, ItemRecord.created_at, ItemRecord.id)
        )

    async def fetch_children(self, parent_id: str) -> list[Node]:
        async with self._sessions() as db:
            await self._get(db, parent_id)
            result = await db.execute(self._children_query(parent_id))
            return [_to_node(r) for r in result.scalars().all()]

    async def fetch_children_page(self, parent_id: str, page_number: int, page_size: int) -> Page:
        async with self._sessions() as db:
            await self._get(db, parent_id)
            # one extra row tells whether a next page exists
            stmt = self._children_query(parent_id).offset(page_number * page_size).limit(page_size + 1)
            rows = (await db.execute(stmt)).scalars().all()
        return Page(
            page_number=page_number,
            data=[_to_node(r) for r in rows[:page_size]],
            has_next_page=len(rows) > page_size,
        )

    async def fetch_descendants(self, root_id: str) -> list[Node]:
        async with self._sessions() as db:
            root = await self._get(db, root_id)
            stmt = (
                select(ItemRecord)
                .where(ItemRecord.path.like(f"{root.path}.%"))
                .order_by(ItemRecord.path, ItemRecord.position)
            )
            result = await db.execute(stmt)
            return [_to_node(r) for r in result.scalars().all()]

    async def fetch_markers(self, node_ids: Sequence[str]) -> dict[str, list[Marker]]:
        if not node_ids:
            return {}
        async with self._sessions() as db:
            result = await db.execute(
                select(MarkerRecord).where(MarkerRecord.item_id.in_(list(node_ids)))
            )
            markers: dict[str, list[Marker]] = {}
            for m in result.scalars().all():
                markers.setdefault(m.item_id, []).append(
                    Marker(id=m.id, node_id=m.item_id, marker_kind=m.kind)
                )
            return markers

    async def post_action(self, node_id: str, action_kind: ActionKind) -> None:
        async with self._sessions() as db:
            db.add(ActionRecord(item_id=node_id, type=ActionKind(action_kind).value))
            await db.commit()
        logger.debug("Recorded action %s on %s", action_kind, node_id)

    async def fetch_file_url(self, node_id: str) -> str:
        node = await self.fetch_node(node_id)
        return node.extra_value("url") or f"{settings.api_host}/items/{node_id}/content"

    async def fetch_etherpad_url(self, node_id: str) -> str:
        node = await self.fetch_node(node_id)
        return node.extra_value("padUrl") or ""

"""Tests for the SQLite-backed dev item store."""

import pytest
import pytest_asyncio
from sqlalchemy import select

from player.errors import NotFound
from player.models.action import ActionRecord
from player.models.item import ItemRecord
from player.models.marker import MarkerRecord
from player.services.datasource import ActionKind
from player.services.local_store import LocalDataSource


@pytest_asyncio.fixture
async def store(session_factory):
    async with session_factory() as db:
        db.add(ItemRecord(id="root", path="root", type="folder", name="Root"))
        for i in range(12):
            db.add(ItemRecord(
                id=f"c{i:02d}",
                parent_id="root",
                path=f"root.c{i:02d}",
                type="document",
                name=f"Child {i}",
                position=i,
                settings={"isPinned": i == 0},
            ))
        db.add(ItemRecord(
            id="deep", parent_id="c00", path="root.c00.deep", type="etherpad", name="Pad",
            extra={"etherpad": {"padUrl": "https://pad/p/deep"}},
        ))
        db.add(ItemRecord(id="other", path="other", type="folder", name="Other"))
        db.add(MarkerRecord(id="m1", item_id="c03", kind="hidden"))
        await db.commit()
    return LocalDataSource(session_factory)


@pytest.mark.asyncio
async def test_fetch_node(store):
    node = await store.fetch_node("c00")
    assert node.name == "Child 0"
    assert node.settings.is_pinned is True


@pytest.mark.asyncio
async def test_missing_node(store):
    with pytest.raises(NotFound):
        await store.fetch_node("nope")


@pytest.mark.asyncio
async def test_children_ordered_by_position(store):
    children = await store.fetch_children("root")
    assert [c.id for c in children] == [f"c{i:02d}" for i in range(12)]


@pytest.mark.asyncio
async def test_pages(store):
    first = await store.fetch_children_page("root", 0, 5)
    last = await store.fetch_children_page("root", 2, 5)
    assert [n.id for n in first.data] == ["c00", "c01", "c02", "c03", "c04"]
    assert first.has_next_page is True
    assert [n.id for n in last.data] == ["c10", "c11"]
    assert last.has_next_page is False


@pytest.mark.asyncio
async def test_exact_multiple_has_no_next_page(store):
    page = await store.fetch_children_page("root", 1, 6)
    assert len(page.data) == 6
    assert page.has_next_page is False


@pytest.mark.asyncio
async def test_descendants_by_path(store):
    descendants = await store.fetch_descendants("root")
    ids = {n.id for n in descendants}
    assert "deep" in ids
    assert "root" not in ids
    assert "other" not in ids
    assert len(ids) == 13


@pytest.mark.asyncio
async def test_markers(store):
    markers = await store.fetch_markers(["c03", "c04"])
    assert [m.marker_kind for m in markers["c03"]] == ["hidden"]
    assert "c04" not in markers


@pytest.mark.asyncio
async def test_post_action(store, session_factory):
    await store.post_action("c01", ActionKind.ITEM_DOWNLOAD)
    async with session_factory() as db:
        rows = (await db.execute(select(ActionRecord))).scalars().all()
    assert [(r.item_id, r.type) for r in rows] == [("c01", "item-download")]


@pytest.mark.asyncio
async def test_urls(store):
    assert await store.fetch_etherpad_url("deep") == "https://pad/p/deep"
    assert (await store.fetch_file_url("c01")).endswith("/items/c01/content")

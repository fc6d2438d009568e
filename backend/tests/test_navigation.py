"""Tests for navigation sync — frames, access errors, root transitions."""

import pytest

from player.errors import AccessDenied, NetworkError
from player.services.navigation import NavigationSync, NavPhase


def _tree(ds, root_id, *children):
    ds.add(root_id, "folder")
    for child in children:
        ds.add(child, "document", parent=root_id)


async def _frames(nav, root_id):
    return [f async for f in nav.sync(root_id)]


@pytest.fixture
def nav(ds):
    return NavigationSync(ds)


class TestSync:
    @pytest.mark.asyncio
    async def test_no_root_shows_nothing(self, nav, ds):
        frames = await _frames(nav, None)
        assert [f.kind for f in frames] == ["nothing"]
        assert ds.calls == []

    @pytest.mark.asyncio
    async def test_tree_of_visible_descendants(self, nav, ds):
        _tree(ds, "r", "a", "b", "c")
        ds.hide("b")

        frames = await _frames(nav, "r")
        assert [f.kind for f in frames] == ["loading", "tree"]
        tree = frames[-1]
        assert tree.root.id == "r"
        assert [n.id for n in tree.items] == ["a", "c"]
        assert nav.state.phase == NavPhase.READY

    @pytest.mark.asyncio
    async def test_hidden_root_still_shown(self, nav, ds):
        _tree(ds, "r", "a")
        ds.hide("r")

        frames = await _frames(nav, "r")
        assert frames[-1].kind == "tree"
        assert frames[-1].root.id == "r"
        assert [n.id for n in frames[-1].items] == ["a"]

    @pytest.mark.asyncio
    async def test_nested_descendants_included(self, nav, ds):
        _tree(ds, "r", "a")
        ds.add("sub", "folder", parent="r")
        ds.add("deep", "document", parent="sub")

        frames = await _frames(nav, "r")
        assert {n.id for n in frames[-1].items} == {"a", "sub", "deep"}

    @pytest.mark.asyncio
    async def test_access_denied_shows_nothing_only(self, nav, ds):
        _tree(ds, "r1", "a")
        ds.fail("fetch_node", "r1", AccessDenied(node_id="r1"))

        frames = await _frames(nav, "r1")
        assert [f.kind for f in frames] == ["nothing"]

    @pytest.mark.asyncio
    async def test_other_error_shows_error(self, nav, ds):
        ds.fail("fetch_node", "r1", NetworkError("down"))
        frames = await _frames(nav, "r1")
        assert [f.kind for f in frames] == ["error"]
        assert frames[0].message
        assert nav.state.phase == NavPhase.ERROR

    @pytest.mark.asyncio
    async def test_descendants_error_shows_error(self, nav, ds):
        _tree(ds, "r", "a")
        ds.fail("fetch_descendants", "r", NetworkError("down"))
        frames = await _frames(nav, "r")
        assert [f.kind for f in frames] == ["loading", "error"]


class TestRootChange:
    @pytest.mark.asyncio
    async def test_loading_between_roots_even_when_cached(self, nav, ds):
        _tree(ds, "A", "a1")
        _tree(ds, "B", "b1")

        await _frames(nav, "A")
        frames = await _frames(nav, "B")

        assert frames[0].kind == "loading"
        assert frames[-1].kind == "tree"
        assert frames[-1].root.id == "B"
        # nothing of A's tree appears while moving to B
        for frame in frames[:-1]:
            assert frame.root is None
        assert nav.state.previous_root_id == "A"

    @pytest.mark.asyncio
    async def test_superseded_sync_stops_yielding(self, nav, ds):
        _tree(ds, "A", "a1")
        _tree(ds, "B", "b1")

        stale = nav.sync("A")
        first = await stale.__anext__()
        assert first.kind == "loading"

        fresh = await _frames(nav, "B")
        assert fresh[-1].root.id == "B"

        with pytest.raises(StopAsyncIteration):
            await stale.__anext__()

    @pytest.mark.asyncio
    async def test_close_stops_yielding(self, nav, ds):
        _tree(ds, "A", "a1")
        stream = nav.sync("A")
        await stream.__anext__()
        nav.close()
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()


class TestSelect:
    @pytest.mark.asyncio
    async def test_select_returns_route(self, ds):
        _tree(ds, "r", "a")
        seen = []
        nav = NavigationSync(ds, on_select=seen.append)
        await _frames(nav, "r")

        route = nav.select("a")
        assert route.root_id == "r"
        assert route.item_id == "a"
        assert route.model_dump(by_alias=True) == {"rootId": "r", "itemId": "a"}
        assert seen == [route]

    def test_select_without_root_raises(self, nav):
        with pytest.raises(ValueError):
            nav.select("a")

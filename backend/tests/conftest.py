"""Test fixtures — in-memory item store, SQLite session and FastAPI test client."""

import asyncio

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from player.api.deps import action_reporter, view_registry
from player.errors import NotFound
from player.main import create_app
from player.models.base import Base
from player.schemas.node import HIDDEN_MARKER_KIND, Marker, Node, Page
from player.services.actions import ActionReporter
from player.services.session import ViewRegistry


class FakeDataSource:
    """Dict-backed data source recording every call.

    ``fail(method, node_id, exc)`` makes one method raise for one id;
    ``page_gate`` (an asyncio.Event) holds page fetches until set.
    """

    def __init__(self):
        self.nodes: dict[str, Node] = {}
        self.children: dict[str, list[str]] = {}
        self.markers: dict[str, list[Marker]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple] = []
        self.actions: list[tuple[str, str]] = []
        self.page_gate: asyncio.Event | None = None

    def add(self, node_id, type="document", parent=None, name=None, extra=None,
            description=None, **node_settings):
        node = Node(
            id=node_id,
            type=type,
            name=name or node_id,
            description=description,
            settings=node_settings,
            extra=extra or {},
        )
        self.nodes[node_id] = node
        if parent is not None:
            self.children.setdefault(parent, []).append(node_id)
        if type == "folder":
            self.children.setdefault(node_id, [])
        return node

    def hide(self, node_id):
        self.markers.setdefault(node_id, []).append(
            Marker(id=f"m-{node_id}", node_id=node_id, marker_kind=HIDDEN_MARKER_KIND)
        )

    def fail(self, method, node_id, exc):
        self.failures[(method, node_id)] = exc

    def calls_to(self, method):
        return [c for c in self.calls if c[0] == method]

    def _check(self, method, node_id):
        self.calls.append((method, node_id))
        exc = self.failures.get((method, node_id))
        if exc is not None:
            raise exc

    async def fetch_node(self, node_id):
        self._check("fetch_node", node_id)
        if node_id not in self.nodes:
            raise NotFound(node_id=node_id)
        return self.nodes[node_id]

    async def fetch_children(self, parent_id):
        self._check("fetch_children", parent_id)
        return [self.nodes[i] for i in self.children.get(parent_id, [])]

    async def fetch_children_page(self, parent_id, page_number, page_size):
        self._check("fetch_children_page", parent_id)
        self.calls[-1] = ("fetch_children_page", parent_id, page_number)
        if self.page_gate is not None:
            await self.page_gate.wait()
        ids = self.children.get(parent_id, [])
        start = page_number * page_size
        return Page(
            page_number=page_number,
            data=[self.nodes[i] for i in ids[start:start + page_size]],
            has_next_page=start + page_size < len(ids),
        )

    async def fetch_descendants(self, root_id):
        self._check("fetch_descendants", root_id)
        out, queue = [], list(self.children.get(root_id, []))
        while queue:
            node_id = queue.pop(0)
            out.append(self.nodes[node_id])
            queue.extend(self.children.get(node_id, []))
        return out

    async def fetch_markers(self, node_ids):
        self._check("fetch_markers", ",".join(node_ids))
        return {i: list(self.markers[i]) for i in node_ids if i in self.markers}

    async def post_action(self, node_id, action_kind):
        self._check("post_action", node_id)
        self.actions.append((node_id, action_kind.value))

    async def fetch_file_url(self, node_id):
        self._check("fetch_file_url", node_id)
        return f"https://files.example/{node_id}"

    async def fetch_etherpad_url(self, node_id):
        self._check("fetch_etherpad_url", node_id)
        return f"https://pad.example/p/{node_id}"


@pytest.fixture
def ds():
    return FakeDataSource()


@pytest_asyncio.fixture
async def session_factory():
    """Async in-memory SQLite session factory for the local store."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def views(ds):
    return ViewRegistry(ds, page_size=10)


@pytest_asyncio.fixture
async def client(ds, views):
    """Async test client with service singletons overridden."""
    app = create_app()
    app.dependency_overrides[view_registry] = lambda: views
    app.dependency_overrides[action_reporter] = lambda: ActionReporter(ds)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

"""
QuickNotes Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

No test talks to a real MongoDB. FakeStore stands in for the Motor client
factory: it counts connection attempts, can be told to fail or stall, and
hands out clients that share one in-memory database.

Fixture Hierarchy:
    ├── fake_store: The simulated store (client factory + data)
    ├── connection_manager: ConnectionManager wired to fake_store
    ├── clock: Controllable clock for deterministic timestamps
    ├── service: NoteService using that clock
    └── test_client: HTTPX AsyncClient against an app using connection_manager
"""

import asyncio
import copy
import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

# Must be set before quicknotes.config is imported
os.environ["MONGODB_URI"] = "mongodb://test-host:27017"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from quicknotes.database import ConnectionManager
from quicknotes.services.note_service import NoteService


# ══════════════════════════════════════════════════════════════════════════
# Simulated Store
# ══════════════════════════════════════════════════════════════════════════


def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in query.items())


class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    def sort(self, key_or_list, direction=None):
        keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction)]
        # Python's sort is stable, so sorting by the least significant key
        # first yields a correct multi-key order
        for key, order in reversed(keys):
            self._documents.sort(key=lambda doc: doc[key], reverse=order < 0)
        return self

    async def to_list(self, length: Optional[int] = None):
        documents = [copy.deepcopy(doc) for doc in self._documents]
        return documents if length is None else documents[:length]


class FakeCollection:
    """In-memory stand-in for AsyncIOMotorCollection. Records every call."""

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.calls: List[str] = []
        self.indexes: List[str] = []

    def find(self, query: Dict[str, Any]):
        self.calls.append("find")
        return FakeCursor([doc for doc in self.documents if _matches(doc, query)])

    async def find_one(self, query: Dict[str, Any]):
        self.calls.append("find_one")
        for doc in self.documents:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, document: Dict[str, Any]):
        self.calls.append("insert_one")
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def insert_many(self, documents: List[Dict[str, Any]]):
        self.calls.append("insert_many")
        ids = []
        for document in documents:
            document.setdefault("_id", ObjectId())
            self.documents.append(copy.deepcopy(document))
            ids.append(document["_id"])
        return SimpleNamespace(inserted_ids=ids)

    async def find_one_and_update(self, query, update, return_document=None):
        self.calls.append("find_one_and_update")
        for doc in self.documents:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                return copy.deepcopy(doc)
        return None

    async def delete_one(self, query: Dict[str, Any]):
        self.calls.append("delete_one")
        for index, doc in enumerate(self.documents):
            if _matches(doc, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def count_documents(self, query: Dict[str, Any]):
        self.calls.append("count_documents")
        return len([doc for doc in self.documents if _matches(doc, query)])

    async def create_indexes(self, models):
        self.calls.append("create_indexes")
        names = [model.document["name"] for model in models]
        for name in names:
            if name not in self.indexes:
                self.indexes.append(name)
        return names


class FakeDatabase:
    def __init__(self, name: str):
        self.name = name
        self.collections: Dict[str, FakeCollection] = {}
        self.ping_error: Optional[Exception] = None

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    async def command(self, name: str):
        if self.ping_error is not None:
            raise self.ping_error
        return {"ok": 1.0}


class FakeClient:
    def __init__(self, store: "FakeStore"):
        self._store = store
        self.closed = False
        self.admin = SimpleNamespace(command=self._admin_command)

    async def _admin_command(self, name: str):
        if self._store.connect_delay:
            await asyncio.sleep(self._store.connect_delay)
        if self._store.failures:
            raise self._store.failures.pop(0)
        return {"ok": 1.0}

    def __getitem__(self, name: str) -> FakeDatabase:
        return self._store.database(name)

    def close(self):
        self.closed = True


class FakeStore:
    """
    Client factory for ConnectionManager that never touches the network.

    Attributes:
        connect_attempts: How many clients were built.
        failures: Exceptions raised by successive connection pings.
        connect_delay: Seconds each connection ping stalls for.
    """

    def __init__(self):
        self.connect_attempts = 0
        self.failures: List[Exception] = []
        self.connect_delay = 0.0
        self.clients: List[FakeClient] = []
        self.options: Dict[str, Any] = {}
        self.uri: Optional[str] = None
        self.databases: Dict[str, FakeDatabase] = {}

    def __call__(self, uri: str, **options) -> FakeClient:
        self.connect_attempts += 1
        self.uri = uri
        self.options = options
        client = FakeClient(self)
        self.clients.append(client)
        return client

    def database(self, name: str) -> FakeDatabase:
        if name not in self.databases:
            self.databases[name] = FakeDatabase(name)
        return self.databases[name]

    def collection(self, db_name: str = "notes-app", name: str = "notes") -> FakeCollection:
        return self.database(db_name)[name]


class FakeClock:
    """Returns a fixed time that tests move forward explicitly."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def connection_manager(fake_store):
    return ConnectionManager(
        "mongodb://test-host:27017",
        "notes-app",
        "notes",
        client_factory=fake_store,
    )


@pytest.fixture
def notes_collection(fake_store) -> FakeCollection:
    return fake_store.collection()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(clock):
    return NoteService(clock=clock)


@pytest_asyncio.fixture
async def test_client(connection_manager):
    """
    HTTPX AsyncClient talking to an app built around the simulated store.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from quicknotes.main import create_app

    app = create_app(connection_manager=connection_manager)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

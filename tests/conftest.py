"""
Pytest configuration and shared fixtures for MDB_AUTOINDEX tests.

This module provides:
- An in-memory fake of the Motor collection index primitives
- Watcher fixtures
- Environment and metrics isolation
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from motor.motor_asyncio import AsyncIOMotorCollection

from mdb_autoindex.indexes import Watcher
from mdb_autoindex.observability import clear_correlation_id, get_metrics_collector

# ============================================================================
# FAKE COLLECTION
# ============================================================================


class FakeCursor:
    """Minimal async cursor exposing ``to_list``."""

    def __init__(self, docs):
        self._docs = list(docs)

    async def to_list(self, length=None):
        return list(self._docs)


class FakeCollection:
    """
    In-memory stand-in for the index primitives of AsyncIOMotorCollection.

    Starts with the default ``_id_`` index. Every index reports ``ops``
    accesses (overridable per name through ``ops_by_name``) since
    ``now - age``. Setting one of the ``*_error`` attributes makes the
    matching primitive raise that exception.
    """

    def __init__(
        self,
        name: str = "test_collection",
        ops: int = 0,
        age: timedelta = timedelta(seconds=1),
    ):
        self.name = name
        self.full_name = f"test_db.{name}"
        self.ops = ops
        self.age = age
        self.ops_by_name: Dict[str, int] = {}
        self.index_docs: List[Dict[str, Any]] = [{"v": 2, "key": {"_id": 1}, "name": "_id_"}]
        self.created: List[tuple] = []
        self.drop_attempts: List[str] = []
        self.list_error: Optional[Exception] = None
        self.create_error: Optional[Exception] = None
        self.drop_error: Optional[Exception] = None
        self.stats_error: Optional[Exception] = None

    def list_indexes(self):
        if self.list_error:
            raise self.list_error
        return FakeCursor(self.index_docs)

    async def create_index(self, keys, **kwargs):
        # Settle on a later loop iteration, like a real round trip
        await asyncio.sleep(0)
        if self.create_error:
            raise self.create_error
        self.created.append((list(keys), kwargs))
        self.index_docs.append({"v": 2, "key": dict(keys), "name": kwargs["name"]})
        return kwargs["name"]

    async def drop_index(self, name):
        self.drop_attempts.append(name)
        if self.drop_error:
            raise self.drop_error
        self.index_docs = [doc for doc in self.index_docs if doc["name"] != name]

    def aggregate(self, pipeline):
        if self.stats_error:
            raise self.stats_error
        since = datetime.now(timezone.utc).replace(tzinfo=None) - self.age
        return FakeCursor(
            {
                "name": doc["name"],
                "key": doc["key"],
                "accesses": {"ops": self.ops_by_name.get(doc["name"], self.ops), "since": since},
            }
            for doc in self.index_docs
        )

    @property
    def index_names(self) -> List[str]:
        return [doc["name"] for doc in self.index_docs]


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def make_collection():
    """Factory for additional fake collections."""
    return FakeCollection


@pytest.fixture
def fake_collection() -> FakeCollection:
    """Collection holding only the default _id index."""
    return FakeCollection()


@pytest.fixture
def watcher(fake_collection: FakeCollection) -> Watcher:
    """Watcher bound to the fake collection (cache not loaded yet)."""
    return Watcher(fake_collection)


@pytest.fixture
def mock_motor_collection() -> MagicMock:
    """Create a mock Motor collection with async index methods."""
    collection = MagicMock(spec=AsyncIOMotorCollection)
    collection.name = "test_collection"
    collection.list_indexes = MagicMock(
        return_value=MagicMock(to_list=AsyncMock(return_value=[]))
    )
    collection.aggregate = MagicMock(return_value=MagicMock(to_list=AsyncMock(return_value=[])))
    collection.create_index = AsyncMock(return_value="test_index")
    collection.drop_index = AsyncMock()
    return collection


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with an empty global metrics collector."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()
    clear_correlation_id()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Reset environment variables before each test."""
    env_vars_to_clear = [
        "MONGO_URI",
        "DB_NAME",
        "MONGO_MAX_POOL_SIZE",
        "MONGO_MIN_POOL_SIZE",
        "MONGO_SERVER_SELECTION_TIMEOUT_MS",
        "AUTOINDEX_CLEANUP_INTERVAL_SECONDS",
        "AUTOINDEX_REAP_PERIOD_SECONDS",
        "AUTOINDEX_ROLLBACK_FAILED_CREATIONS",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    yield

"""
Card Service — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Tests run without a MongoDB server: the `cards` collection is replaced
       by an in-memory async fake that returns real PyMongo result objects.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── settings:         Settings pointed at testDb, short timeouts
    ├── fake_collection:  In-memory stand-in for the driver's collection
    ├── card_store:       CardStore wrapping fake_collection
    ├── app:              create_app(settings, card_store)
    ├── test_client:      HTTPX AsyncClient over ASGITransport
    └── sample_card_payload: A valid create body
"""

from typing import Any, Dict, List, Mapping, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pymongo.errors import DuplicateKeyError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from cardservice.config import Settings
from cardservice.database import CardStore
from cardservice.main import create_app


# ══════════════════════════════════════════════════════════════════════════
# In-memory collection
# ══════════════════════════════════════════════════════════════════════════

class FakeCursor:
    """Async cursor over a snapshot of matching documents."""

    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        if length is None:
            return list(self._documents)
        return self._documents[:length]


class FakeCollection:
    """
    Just enough of AsyncCollection for CardStore: exact-match filters and
    `$set` updates. Every call is recorded in `calls`.
    """

    name = "cards"

    def __init__(self):
        self.documents: List[Dict[str, Any]] = []
        self.calls: List[str] = []

    @staticmethod
    def _matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
        return all(document.get(key) == value for key, value in query.items())

    async def find_one(self, query):
        self.calls.append("find_one")
        for document in self.documents:
            if self._matches(document, query):
                return dict(document)
        return None

    def find(self, query):
        self.calls.append("find")
        return FakeCursor([dict(d) for d in self.documents if self._matches(d, query)])

    async def insert_one(self, document):
        self.calls.append("insert_one")
        if any(d["_id"] == document["_id"] for d in self.documents):
            raise DuplicateKeyError("E11000 duplicate key error", code=11000)
        self.documents.append(dict(document))
        return InsertOneResult(document["_id"], True)

    async def update_one(self, query, update):
        self.calls.append("update_one")
        for document in self.documents:
            if self._matches(document, query):
                before = dict(document)
                document.update(update.get("$set", {}))
                return UpdateResult({"n": 1, "nModified": int(document != before)}, True)
        return UpdateResult({"n": 0, "nModified": 0}, True)

    async def delete_one(self, query):
        self.calls.append("delete_one")
        for index, document in enumerate(self.documents):
            if self._matches(document, query):
                del self.documents[index]
                return DeleteResult({"n": 1}, True)
        return DeleteResult({"n": 0}, True)


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings():
    """Test settings; `_env_file=None` keeps a developer's .env out of the run."""
    return Settings(
        _env_file=None,
        database_name="testDb",
        request_timeout=1.0,
        connect_timeout=1.0,
        log_level="WARNING",
    )


@pytest.fixture
def fake_collection():
    return FakeCollection()


@pytest.fixture
def card_store(settings, fake_collection):
    return CardStore(
        fake_collection,
        request_timeout=settings.request_timeout,
        database_name=settings.database_name,
    )


@pytest.fixture
def app(settings, card_store):
    return create_app(settings, card_store)


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/cards")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_card_payload():
    return {"Name": "Test card name goes here", "Width": "111px", "Height": "222px"}

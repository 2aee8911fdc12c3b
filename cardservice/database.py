"""
Card Service — Document Store Adapter
=======================================

What:  Opens the MongoDB connection and wraps the `cards` collection behind a
       small async interface (find_one, find_many, insert_one, update_one,
       delete_one).
Why:   Handlers depend on five operations, not on the driver. Tests swap the
       collection for an in-memory fake without touching the service code.
How:   PyMongo's native asyncio client. Startup issues a `ping` bounded by
       `connect_timeout`; every later call is bounded by `request_timeout`.
Who:   connect_store() is called by the server lifecycle; CardStore is handed
       to the application factory and reaches handlers via get_card_store().

Failure policy:
    - Startup: any failure (bad URI, dial error, ping error, timeout) becomes
      StoreConnectionError with a fixed message. The cause is logged at DEBUG.
    - Per call: driver errors and timeouts become StoreOperationError carrying
      the driver's message. Nothing is retried.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from cardservice.config import Settings
from cardservice.exceptions import StoreConnectionError, StoreOperationError

logger = logging.getLogger(__name__)


def redact_uri(uri: str) -> str:
    """Hide the `user:password@` part of a connection URI for logging."""
    scheme, sep, rest = uri.partition("://")
    if not sep:
        return uri
    authority, slash, tail = rest.partition("/")
    if "@" in authority:
        authority = "***@" + authority.rpartition("@")[2]
    return f"{scheme}://{authority}{slash}{tail}"


class CardStore:
    """
    Handle bound to one database/collection pair.

    The underlying client is safe for concurrent use, so a single CardStore
    is shared by all requests. No application-level locking.
    """

    def __init__(
        self,
        collection: Any,
        request_timeout: float,
        client: Optional[AsyncMongoClient] = None,
        database_name: str = "",
    ):
        self._collection = collection
        self._client = client
        self.request_timeout = request_timeout
        self.database_name = database_name
        self.collection_name = getattr(collection, "name", "")

    async def _run(
        self,
        operation: str,
        method: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> Any:
        """Await one driver call under the per-request budget."""
        try:
            return await asyncio.wait_for(method(*args), timeout=self.request_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Store %s exceeded %.1fs budget", operation, self.request_timeout
            )
            raise StoreOperationError(
                message="store operation timed out", operation=operation
            ) from None
        except PyMongoError as e:
            logger.warning("Store %s failed: %s", operation, str(e))
            raise StoreOperationError(message=str(e), operation=operation) from e

    async def _fetch_all(self, query: Mapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._collection.find(query).to_list(length=None)

    async def find_one(self, query: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        return await self._run("find_one", self._collection.find_one, query)

    async def find_many(self, query: Mapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._run("find_many", self._fetch_all, query)

    async def insert_one(self, document: Mapping[str, Any]) -> InsertOneResult:
        return await self._run("insert_one", self._collection.insert_one, document)

    async def update_one(
        self, query: Mapping[str, Any], update: Mapping[str, Any]
    ) -> UpdateResult:
        return await self._run("update_one", self._collection.update_one, query, update)

    async def delete_one(self, query: Mapping[str, Any]) -> DeleteResult:
        return await self._run("delete_one", self._collection.delete_one, query)

    async def close(self) -> None:
        """Release the driver's connection pool. Safe to call twice."""
        if self._client is not None:
            client, self._client = self._client, None
            await client.close()


async def connect_store(settings: Settings) -> CardStore:
    """
    Connect to MongoDB and verify it answers within `connect_timeout`.

    Returns:
        CardStore bound to settings.database_name / settings.collection_name

    Raises:
        StoreConnectionError: on any failure; the driver's cause is discarded.
    """
    timeout_ms = int(settings.connect_timeout * 1000)
    client: Optional[AsyncMongoClient] = None
    try:
        client = AsyncMongoClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
        )
        await asyncio.wait_for(
            client.admin.command("ping"), timeout=settings.connect_timeout
        )
    except Exception as e:
        logger.debug("Store connection probe failed: %r", e)
        if client is not None:
            await client.close()
        raise StoreConnectionError(
            context={"database": settings.database_name}
        ) from None

    logger.info(
        "MongoDB | Uri: %s | Database: %s",
        redact_uri(settings.mongo_uri),
        settings.database_name,
    )
    collection = client[settings.database_name][settings.collection_name]
    return CardStore(
        collection,
        request_timeout=settings.request_timeout,
        client=client,
        database_name=settings.database_name,
    )


def get_card_store(request: Request) -> CardStore:
    """
    FastAPI dependency returning the store handle attached by create_app().

    Example usage in a route:
        @router.get("/cards")
        async def list_cards(store: CardStore = Depends(get_card_store)):
            ...
    """
    return request.app.state.store

"""
QuickNotes Backend — MongoDB Connection Management
====================================================

What:  Owns the process-wide Motor client, the notes collection accessor,
       index creation and the FastAPI dependency that hands the manager to
       route handlers.
How:   ConnectionManager lazily opens one client on first use and caches it.
       Concurrent first callers share a single in-flight connection task.
Who:   Constructed once by the application factory (main.create_app) and by
       the init-db command; injected everywhere else.
When:  The connection is opened on the first acquire(), not at import or
       startup, so a cold instance with no traffic never dials the store.

Connection Pooling Strategy:
    maxPoolSize=10:                 small ceiling, many short-lived callers
    minPoolSize=1:                  keep one warm socket between invocations
    maxIdleTimeMS=5000:             reap idle sockets quickly
    serverSelectionTimeoutMS=5000:  fail fast when no server is reachable
    socketTimeoutMS=30000:          bound a stuck operation

State machine of the cache:
    empty ──acquire()──▶ connecting ──ok──▶ connected ──close()──▶ empty
                              │
                              └──error──▶ empty (next acquire() retries)
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from fastapi import Request
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING, TEXT, IndexModel

from quicknotes.config import Settings, settings
from quicknotes.exceptions import (
    ConfigurationError,
    ConnectionErrorKind,
    StoreConnectionError,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


# ══════════════════════════════════════════════════════════════════════════
# Error Translation
# ══════════════════════════════════════════════════════════════════════════

def translate_connection_error(error: BaseException) -> StoreConnectionError:
    """
    Sort a raw driver failure into a user-safe StoreConnectionError.

    Matching is done on the lowercased error text, first rule wins. The
    driver raises different exception types for the same root cause
    depending on topology (ServerSelectionTimeoutError wrapping a DNS error,
    OperationFailure for auth, InvalidURI, ...), the text is what they share.
    """
    text = str(error).lower()

    if "bad auth" in text or "authentication failed" in text:
        kind = ConnectionErrorKind.AUTHENTICATION
    elif any(
        marker in text
        for marker in (
            "enotfound",
            "getaddrinfo",
            "name or service not known",
            "nodename nor servname",
            "connection refused",
        )
    ):
        kind = ConnectionErrorKind.UNREACHABLE
    elif "timeout" in text or "timed out" in text:
        kind = ConnectionErrorKind.TIMEOUT
    elif "ip" in text and "not" in text and "whitelist" in text:
        kind = ConnectionErrorKind.ACCESS_RESTRICTED
    elif (
        "invalid connection string" in text
        or "uri must" in text
        or "invalid uri" in text
    ):
        kind = ConnectionErrorKind.INVALID_ADDRESS
    elif "server selection" in text:
        return StoreConnectionError(
            ConnectionErrorKind.GENERIC,
            message="Cannot connect to MongoDB",
            context={"error_type": type(error).__name__},
        )
    else:
        kind = ConnectionErrorKind.GENERIC

    return StoreConnectionError(kind, context={"error_type": type(error).__name__})


# ══════════════════════════════════════════════════════════════════════════
# Connection Manager
# ══════════════════════════════════════════════════════════════════════════

class ConnectionManager:
    """
    Lazily-initialized, cached MongoDB connection.

    Holds at most one live client and at most one in-flight connection task.
    acquire() is idempotent and safe to call from any number of concurrent
    tasks: they all await the same attempt.

    Args:
        uri: MongoDB connection string. None/empty is reported lazily as
             ConfigurationError on the first acquire().
        db_name: Database to resolve on the client.
        collection_name: The single collection notes live in.
        client_factory: Callable building the client. Defaults to
             AsyncIOMotorClient; tests pass a simulated store here.
    """

    def __init__(
        self,
        uri: Optional[str],
        db_name: str = "notes-app",
        collection_name: str = "notes",
        *,
        app_name: str = "quicknotes",
        max_pool_size: int = 10,
        min_pool_size: int = 1,
        max_idle_time_ms: int = 5000,
        server_selection_timeout_ms: int = 5000,
        socket_timeout_ms: int = 30000,
        client_factory: ClientFactory = AsyncIOMotorClient,
    ):
        self.uri = uri
        self.db_name = db_name
        self.collection_name = collection_name
        self.client_options = {
            "appname": app_name,
            "maxPoolSize": max_pool_size,
            "minPoolSize": min_pool_size,
            "maxIdleTimeMS": max_idle_time_ms,
            "serverSelectionTimeoutMS": server_selection_timeout_ms,
            "socketTimeoutMS": socket_timeout_ms,
            "tz_aware": True,
        }
        self._client_factory = client_factory
        self._client: Optional[Any] = None
        self._db: Optional[AsyncIOMotorDatabase] = None
        self._pending: Optional["asyncio.Future[AsyncIOMotorDatabase]"] = None

    @classmethod
    def from_settings(
        cls,
        config: Settings = settings,
        client_factory: ClientFactory = AsyncIOMotorClient,
    ) -> "ConnectionManager":
        return cls(
            config.mongodb_uri,
            config.mongodb_db_name,
            config.mongodb_collection,
            app_name=config.mongodb_app_name,
            max_pool_size=config.mongodb_max_pool_size,
            min_pool_size=config.mongodb_min_pool_size,
            max_idle_time_ms=config.mongodb_max_idle_time_ms,
            server_selection_timeout_ms=config.mongodb_server_selection_timeout_ms,
            socket_timeout_ms=config.mongodb_socket_timeout_ms,
            client_factory=client_factory,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.uri)

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._db is not None

    async def acquire(self) -> AsyncIOMotorDatabase:
        """
        Return the cached database handle, connecting first if needed.

        Raises:
            ConfigurationError: MONGODB_URI is not set.
            StoreConnectionError: The connection attempt failed.
        """
        if self._client is not None and self._db is not None:
            return self._db

        if self._pending is None:
            if not self.uri:
                raise ConfigurationError()
            self._pending = asyncio.ensure_future(self._connect())

        # shield: a caller being cancelled must not cancel the shared attempt
        return await asyncio.shield(self._pending)

    async def _connect(self) -> AsyncIOMotorDatabase:
        client = None
        try:
            logger.info("Opening MongoDB connection (db=%s)", self.db_name)
            client = self._client_factory(self.uri, **self.client_options)
            # The driver connects lazily; ping forces server selection now
            await client.admin.command("ping")
        except Exception as exc:
            error = translate_connection_error(exc)
            logger.error(
                "MongoDB connection failed (%s): %s",
                error.kind.value,
                exc,
                exc_info=True,
            )
            raise error from exc
        else:
            db = client[self.db_name]
            self._client = client
            self._db = db
            logger.info("MongoDB connection established")
            return db
        finally:
            # After close(), a newer acquire() may own _pending
            if self._pending is asyncio.current_task():
                self._pending = None
            # Failed or cancelled: the client was never installed
            if client is not None and self._client is not client:
                client.close()

    async def notes_collection(self) -> AsyncIOMotorCollection:
        """Handle to the notes collection, connecting first if needed."""
        db = await self.acquire()
        return db[self.collection_name]

    async def check_connection(self) -> bool:
        """
        Report connectivity without raising.

        Used by external monitoring; any failure, including missing
        configuration, is simply `False`.
        """
        if not self.is_configured:
            return False
        try:
            db = await self.acquire()
            await db.command("ping")
            return True
        except Exception as exc:
            logger.warning("MongoDB connectivity check failed: %s", exc)
            return False

    async def close(self) -> None:
        """Close the client and reset the cache. Safe to call repeatedly."""
        pending = self._pending
        if pending is not None and not pending.done():
            pending.cancel()
        self._pending = None
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB connection closed")
        self._client = None
        self._db = None


# ══════════════════════════════════════════════════════════════════════════
# Indexes
# ══════════════════════════════════════════════════════════════════════════

NOTE_INDEXES = [
    IndexModel([("updatedAt", DESCENDING)], name="updatedAt_-1"),
    IndexModel([("createdAt", DESCENDING)], name="createdAt_-1"),
    IndexModel([("title", TEXT), ("content", TEXT)], name="notes_text_search"),
]

# Ties on updatedAt fall back to insertion order (ObjectIds grow monotonically)
NOTE_LIST_SORT = [("updatedAt", DESCENDING), ("_id", ASCENDING)]


async def ensure_indexes(collection: AsyncIOMotorCollection) -> list:
    """Create the notes indexes. Idempotent: existing indexes are kept."""
    names = await collection.create_indexes(NOTE_INDEXES)
    logger.info("Ensured indexes on %s: %s", collection.name, ", ".join(names))
    return names


# ── FastAPI Dependency ────────────────────────────────────────────────────
def get_connection_manager(request: Request) -> ConnectionManager:
    """
    FastAPI dependency returning the application's connection manager.

    The manager lives on app.state (see main.create_app), so tests can
    build an app around a manager backed by a simulated store.
    """
    return request.app.state.connection_manager

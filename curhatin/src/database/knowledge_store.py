"""
Curhatin - Knowledge Store
===========================
Async MongoDB persistence for reference documents, backed by ``motor``.

Design decisions:
  • **Dependency Injection** — the store wraps an injected collection,
    so tests can hand it an ``AsyncMock`` and the app can share one
    client across requests.
  • **Full scan** — ``find_all`` returns every document; similarity is
    computed in-process by the RAG engine.  Cost is O(n) per query.
  • **Bounded boot retry** — ``MongoKnowledgeStore.connect`` pings the
    server up to ``retries`` times before giving up.  No other call
    is retried.

Collection schema (``knowledge``)::

    {
        "_id": str,            # uuid4
        "title": str,
        "content": str,
        "category": str,
        "embedding": [float, ...],
        "created_at": datetime
    }

Usage:
    store = await MongoKnowledgeStore.connect(uri, "mental_chatbot")
    await store.insert_one(doc)
    docs = await store.find_all()
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

import motor.motor_asyncio
from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from curhatin.src.utils.errors import StoreError
from curhatin.src.utils.logger import get_logger, redact_uri

logger = get_logger(__name__)


class KnowledgeDocument(BaseModel):
    """A reference document with its embedding.  Immutable once stored."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., alias="_id")
    title: str
    content: str
    category: str
    embedding: list[float] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, v: object) -> object:
        # Rows inserted outside the API (mongosh, imports) get an ObjectId.
        return str(v) if isinstance(v, ObjectId) else v

    def to_mongo(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


@runtime_checkable
class KnowledgeStore(Protocol):
    """What the RAG engine and ingestion flow need from persistence."""

    async def find_all(self) -> list[KnowledgeDocument]: ...

    async def insert_one(self, document: KnowledgeDocument) -> None: ...

    async def ping(self) -> None: ...


class MongoKnowledgeStore:
    """
    ``KnowledgeStore`` over a motor collection.

    Parameters
    ----------
    collection
        The ``knowledge`` collection (or a test double).
    client
        Owning client, closed by :meth:`close`.  Optional for tests.
    """

    __slots__ = ("_collection", "_client")

    def __init__(self, collection: motor.motor_asyncio.AsyncIOMotorCollection, client: motor.motor_asyncio.AsyncIOMotorClient | None = None) -> None:
        self._collection = collection
        self._client = client


    @classmethod
    async def connect(cls, uri: str, db_name: str, collection_name: str = "knowledge", retries: int = 5, retry_delay: float = 5.0) -> MongoKnowledgeStore:
        """
        Create a client and verify the server answers ``ping``.

        Raises
        ------
        StoreError
            If every attempt fails.  Callers treat this as a boot failure.
        """
        logger.info("[STORE] Connecting to MongoDB at %s (db: %s)", redact_uri(uri), db_name)
        last_exc: Exception | None = None
        for attempt in range(1, retries + 1):
            try:
                client = motor.motor_asyncio.AsyncIOMotorClient(uri, tz_aware=True)
                store = cls(client[db_name][collection_name], client)
            except PyMongoError as exc:
                # Bad URI or names: retrying cannot help.
                logger.error("[STORE] Invalid MongoDB configuration for %s: %s", redact_uri(uri), exc)
                raise StoreError(f"Invalid MongoDB configuration: {exc}") from exc

            try:
                await store.ping()
            except StoreError as exc:
                last_exc = exc
                client.close()
                if attempt == retries:
                    break
                logger.warning("[STORE] Failed to connect to MongoDB (attempt %d/%d): %s. Retrying in %.0fs...", attempt, retries, exc, retry_delay)
                await asyncio.sleep(retry_delay)
                continue

            logger.info("[STORE] Connected to MongoDB database: %s", db_name)
            return store

        logger.error("[STORE] Failed to connect to MongoDB after %d attempts: %s", retries, last_exc)
        raise StoreError(f"Failed to connect to MongoDB: {last_exc}")


    async def find_all(self) -> list[KnowledgeDocument]:
        """
        Return every stored document (full collection scan).

        Rows that do not match ``KnowledgeDocument`` are skipped with a
        warning, so one malformed row cannot disable retrieval.
        """
        try:
            raw = await self._collection.find({}).to_list(length=None)
        except PyMongoError as exc:
            raise StoreError(f"Failed to query documents: {exc}") from exc

        documents: list[KnowledgeDocument] = []
        for doc in raw:
            try:
                documents.append(KnowledgeDocument.model_validate(doc))
            except PydanticValidationError as exc:
                logger.warning("[STORE] Skipping malformed document %r: %d validation error(s)", doc.get("_id") if isinstance(doc, dict) else None, exc.error_count())
        return documents


    async def insert_one(self, document: KnowledgeDocument) -> None:
        try:
            await self._collection.insert_one(document.to_mongo())
        except PyMongoError as exc:
            raise StoreError(f"Failed to insert document: {exc}") from exc
        logger.debug("[STORE] Inserted document %s (%s)", document.id, document.category)


    async def ping(self) -> None:
        """Raise ``StoreError`` unless the server answers."""
        try:
            await self._collection.database.command("ping")
        except PyMongoError as exc:
            raise StoreError(f"MongoDB ping failed: {exc}") from exc


    async def ensure_indexes(self) -> None:
        """Create the ``category`` and ``created_at`` indexes used for browsing."""
        try:
            await self._collection.create_index([("category", ASCENDING)])
            await self._collection.create_index([("created_at", DESCENDING)])
        except PyMongoError as exc:
            raise StoreError(f"Failed to create indexes: {exc}") from exc
        logger.info("[STORE] Indexes ensured on '%s'.", self._collection.name)


    async def count(self) -> int:
        try:
            return await self._collection.count_documents({})
        except PyMongoError as exc:
            raise StoreError(f"Failed to count documents: {exc}") from exc


    async def drop(self) -> None:
        """Drop the whole collection (setup script only)."""
        try:
            await self._collection.drop()
        except PyMongoError as exc:
            raise StoreError(f"Failed to drop collection: {exc}") from exc
        logger.warning("[STORE] Dropped collection '%s'.", self._collection.name)


    def close(self) -> None:
        if self._client is not None:
            self._client.close()


    def __repr__(self) -> str:
        return f"MongoKnowledgeStore(collection='{self._collection.name}')"

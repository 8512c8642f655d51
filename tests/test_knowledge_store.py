"""Tests for the MongoDB knowledge store against a mocked motor collection."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import motor.motor_asyncio
import pytest
from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import InvalidURI, PyMongoError, ServerSelectionTimeoutError

from conftest import FakeEmbedder, make_document
from curhatin.src.core.chat_service import ChatService
from curhatin.src.core.rag_engine import RAGService
from curhatin.src.database.knowledge_store import KnowledgeDocument, KnowledgeStore, MongoKnowledgeStore
from curhatin.src.utils.errors import StoreError


def make_collection() -> MagicMock:
    collection = MagicMock()
    collection.name = "knowledge"
    collection.insert_one = AsyncMock()
    collection.create_index = AsyncMock()
    collection.count_documents = AsyncMock(return_value=0)
    collection.drop = AsyncMock()
    collection.database.command = AsyncMock(return_value={"ok": 1.0})
    collection.find.return_value.to_list = AsyncMock(return_value=[])
    return collection


class FakeMotorClient:
    """Stands in for ``AsyncIOMotorClient``; ``client[db][coll]`` yields one collection."""

    instances: list["FakeMotorClient"] = []

    def __init__(self, collection: MagicMock) -> None:
        self.collection = collection
        self.closed = False
        FakeMotorClient.instances.append(self)

    def __getitem__(self, name: str) -> dict[str, MagicMock]:
        return {"knowledge": self.collection}

    def close(self) -> None:
        self.closed = True


class TestKnowledgeDocument:
    def test_id_round_trips_through_mongo_alias(self):
        doc = make_document("Anxiety Coping", [0.1, 0.2], doc_id="abc")

        raw = doc.to_mongo()

        assert raw["_id"] == "abc"
        assert "id" not in raw
        assert KnowledgeDocument.model_validate(raw) == doc

    def test_created_at_defaults_to_utc_now(self):
        doc = KnowledgeDocument(id="x", title="t", content="c", category="general")

        assert doc.created_at.tzinfo == timezone.utc
        assert doc.embedding == []


class TestMongoKnowledgeStore:
    @pytest.mark.asyncio
    async def test_find_all_scans_whole_collection(self):
        collection = make_collection()
        created = datetime(2024, 5, 1, tzinfo=timezone.utc)
        collection.find.return_value.to_list.return_value = [
            {"_id": "a", "title": "Anxiety Coping", "content": "breathe", "category": "general", "embedding": [1.0, 0.0], "created_at": created},
        ]

        docs = await MongoKnowledgeStore(collection).find_all()

        collection.find.assert_called_once_with({})
        collection.find.return_value.to_list.assert_awaited_once_with(length=None)
        assert docs == [KnowledgeDocument(id="a", title="Anxiety Coping", content="breathe", category="general", embedding=[1.0, 0.0], created_at=created)]

    @pytest.mark.asyncio
    async def test_insert_one_writes_aliased_document(self):
        collection = make_collection()
        doc = make_document("Anxiety Coping", [0.5], doc_id="id-1")

        await MongoKnowledgeStore(collection).insert_one(doc)

        collection.insert_one.assert_awaited_once_with(doc.to_mongo())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, attr", [("find_all", None), ("insert_one", "insert_one"), ("ping", None), ("count", "count_documents"), ("drop", "drop")])
    async def test_driver_errors_become_store_errors(self, method, attr):
        collection = make_collection()
        failure = PyMongoError("connection reset")
        collection.find.return_value.to_list.side_effect = failure
        collection.database.command.side_effect = failure
        if attr is not None:
            getattr(collection, attr).side_effect = failure

        store = MongoKnowledgeStore(collection)
        args = (make_document("x", [1.0]),) if method == "insert_one" else ()

        with pytest.raises(StoreError):
            await getattr(store, method)(*args)

    @pytest.mark.asyncio
    async def test_ensure_indexes(self):
        collection = make_collection()

        await MongoKnowledgeStore(collection).ensure_indexes()

        collection.create_index.assert_any_await([("category", ASCENDING)])
        collection.create_index.assert_any_await([("created_at", DESCENDING)])

    def test_close_closes_owning_client(self):
        client = MagicMock()

        MongoKnowledgeStore(make_collection(), client).close()

        client.close.assert_called_once()

    def test_satisfies_store_protocol(self):
        assert isinstance(MongoKnowledgeStore(make_collection()), KnowledgeStore)


class TestConnect:
    @pytest.fixture(autouse=True)
    def _reset_clients(self):
        FakeMotorClient.instances.clear()

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self, monkeypatch):
        collection = make_collection()
        collection.database.command.side_effect = [ServerSelectionTimeoutError("no server"), ServerSelectionTimeoutError("no server"), {"ok": 1.0}]
        monkeypatch.setattr(motor.motor_asyncio, "AsyncIOMotorClient", lambda uri, **kwargs: FakeMotorClient(collection))

        store = await MongoKnowledgeStore.connect("mongodb://db:27017", "mental_chatbot", retries=5, retry_delay=0)

        assert isinstance(store, MongoKnowledgeStore)
        assert collection.database.command.await_count == 3
        # Clients from failed attempts are closed; the live one is not.
        assert [c.closed for c in FakeMotorClient.instances] == [True, True, False]

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self, monkeypatch):
        collection = make_collection()
        collection.database.command.side_effect = ServerSelectionTimeoutError("no server")
        monkeypatch.setattr(motor.motor_asyncio, "AsyncIOMotorClient", lambda uri, **kwargs: FakeMotorClient(collection))

        with pytest.raises(StoreError, match="Failed to connect to MongoDB"):
            await MongoKnowledgeStore.connect("mongodb://db:27017", "mental_chatbot", retries=3, retry_delay=0)

        assert collection.database.command.await_count == 3
        assert all(c.closed for c in FakeMotorClient.instances)

    @pytest.mark.asyncio
    async def test_invalid_uri_fails_without_retrying(self, monkeypatch):
        attempts = []

        def reject(uri, **kwargs):
            attempts.append(uri)
            raise InvalidURI("Invalid URI scheme: URI must begin with 'mongodb://' or 'mongodb+srv://'")

        monkeypatch.setattr(motor.motor_asyncio, "AsyncIOMotorClient", reject)

        with pytest.raises(StoreError, match="Invalid MongoDB configuration"):
            await MongoKnowledgeStore.connect("localhost:27017", "mental_chatbot", retries=5, retry_delay=0)

        assert attempts == ["localhost:27017"]


class TestForeignRows:
    """Rows written outside the ingestion API."""

    @pytest.mark.asyncio
    async def test_object_id_is_read_as_string(self):
        oid = ObjectId()
        collection = make_collection()
        collection.find.return_value.to_list.return_value = [
            {"_id": oid, "title": "Anxiety Coping", "content": "breathe", "category": "general", "embedding": [1.0, 0.0, 0.0]},
        ]

        (doc,) = await MongoKnowledgeStore(collection).find_all()

        assert doc.id == str(oid)

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped(self):
        collection = make_collection()
        collection.find.return_value.to_list.return_value = [
            {"_id": "ok", "title": "Anxiety Coping", "content": "breathe", "category": "general", "embedding": [1.0, 0.0, 0.0]},
            {"_id": "no-title", "content": "c", "category": "general", "embedding": [1.0]},
            {"_id": "bad-embedding", "title": "t", "content": "c", "category": "general", "embedding": "not a vector"},
        ]

        docs = await MongoKnowledgeStore(collection).find_all()

        assert [doc.id for doc in docs] == ["ok"]

    @pytest.mark.asyncio
    async def test_chat_still_answers_over_foreign_rows(self, llm):
        collection = make_collection()
        collection.find.return_value.to_list.return_value = [
            {"_id": ObjectId(), "title": "Anxiety Coping", "content": "breathing exercises help", "category": "general", "embedding": [1.0, 0.0, 0.0]},
            {"_id": ObjectId(), "title": 42, "content": None, "category": "general", "embedding": [1.0, 0.0, 0.0]},
        ]
        service = ChatService(RAGService(MongoKnowledgeStore(collection), FakeEmbedder()), llm)

        reply = await service.chat("I feel anxious")

        assert reply.response == llm.reply
        assert reply.sources == ["Anxiety Coping"]

"""Pytest configuration and fixtures for Curhatin tests."""

import os

# Settings are loaded at import time; provide the required key first.
os.environ.setdefault("OPENROUTER_API_KEY", "test-openrouter-key")
os.environ.setdefault("ENV", "dev")

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from langchain_core.messages import AIMessage, BaseMessage  # noqa: E402

from curhatin.src.api.context import AppContext, get_context  # noqa: E402
from curhatin.src.core.chat_service import ChatService  # noqa: E402
from curhatin.src.core.ingestor import IngestionService  # noqa: E402
from curhatin.src.core.rag_engine import RAGService  # noqa: E402
from curhatin.src.database.knowledge_store import KnowledgeDocument  # noqa: E402
from curhatin.src.main import create_app  # noqa: E402
from curhatin.src.utils.errors import StoreError  # noqa: E402


# -------------------------------------------------------------------------
# Test doubles
# -------------------------------------------------------------------------


class FakeEmbedder:
    """Returns canned vectors; unknown texts get ``default``."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, default: list[float] | None = None, error: Exception | None = None) -> None:
        self.vectors = vectors or {}
        self.default = default if default is not None else [1.0, 0.0, 0.0]
        self.error = error
        self.calls: list[str] = []
        self.closed = False

    async def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return list(self.vectors.get(text, self.default))

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_query(t) for t in texts]

    async def aclose(self) -> None:
        self.closed = True


class InMemoryKnowledgeStore:
    """List-backed ``KnowledgeStore``."""

    def __init__(self, documents: list[KnowledgeDocument] | None = None) -> None:
        self.documents: list[KnowledgeDocument] = list(documents or [])
        self.fail_reads = False
        self.fail_writes = False
        self.fail_ping = False
        self.find_all_calls = 0

    async def find_all(self) -> list[KnowledgeDocument]:
        self.find_all_calls += 1
        if self.fail_reads:
            raise StoreError("Failed to query documents: connection reset")
        return list(self.documents)

    async def insert_one(self, document: KnowledgeDocument) -> None:
        if self.fail_writes:
            raise StoreError("Failed to insert document: not primary")
        self.documents.append(document)

    async def ping(self) -> None:
        if self.fail_ping:
            raise StoreError("MongoDB ping failed: timeout")


class FakeChatModel:
    """Records the messages it receives and answers with ``reply``."""

    def __init__(self, reply: str = "It sounds like you're carrying a lot right now.", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[list[BaseMessage]] = []

    async def ainvoke(self, messages: list[BaseMessage], **kwargs: object) -> AIMessage:
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


def make_document(title: str, embedding: list[float], content: str = "", category: str = "general", doc_id: str | None = None) -> KnowledgeDocument:
    return KnowledgeDocument(id=doc_id or f"doc-{title.lower().replace(' ', '-')}", title=title, content=content or f"{title} content", category=category, embedding=embedding)


# -------------------------------------------------------------------------
# Fixtures
# -------------------------------------------------------------------------


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def store() -> InMemoryKnowledgeStore:
    return InMemoryKnowledgeStore()


@pytest.fixture
def llm() -> FakeChatModel:
    return FakeChatModel()


@pytest.fixture
def rag(store: InMemoryKnowledgeStore, embedder: FakeEmbedder) -> RAGService:
    return RAGService(store, embedder)


@pytest.fixture
def chat_service(rag: RAGService, llm: FakeChatModel) -> ChatService:
    return ChatService(rag, llm, top_k=3, history_limit=10)


@pytest.fixture
def context(store: InMemoryKnowledgeStore, embedder: FakeEmbedder, chat_service: ChatService) -> AppContext:
    return AppContext(store=store, embedder=embedder, chat=chat_service, ingestion=IngestionService(store, embedder))


@pytest.fixture
def app(context: AppContext) -> FastAPI:
    """FastAPI app with the startup context replaced by in-memory fakes."""
    application = create_app()
    application.dependency_overrides[get_context] = lambda: context
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

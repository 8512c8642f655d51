"""
Curhatin - Application Context
===============================
Long-lived handles shared read-only by every request: the knowledge
store, the embedding client, and the services built on them.  Created
once in the FastAPI lifespan, stored on ``app.state.context``, and
handed to route handlers through ``Depends(get_context)``.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from curhatin.config.settings import Settings
from curhatin.src.core.chat_service import ChatService, build_chat_model
from curhatin.src.core.embeddings import OpenRouterEmbedder
from curhatin.src.core.ingestor import IngestionService
from curhatin.src.core.rag_engine import RAGService
from curhatin.src.database.knowledge_store import KnowledgeStore, MongoKnowledgeStore
from curhatin.src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppContext:
    store: KnowledgeStore
    embedder: OpenRouterEmbedder
    chat: ChatService
    ingestion: IngestionService

    async def aclose(self) -> None:
        await self.embedder.aclose()
        if isinstance(self.store, MongoKnowledgeStore):
            self.store.close()
        logger.info("Application context closed.")


async def build_context(settings: Settings) -> AppContext:
    """Connect to MongoDB (bounded retry) and wire every service."""
    store = await MongoKnowledgeStore.connect(
        settings.MONGO_URI.get_secret_value(),
        settings.MONGO_DB_NAME,
        collection_name=settings.MONGO_COLLECTION,
        retries=settings.MONGO_CONNECT_RETRIES,
        retry_delay=settings.MONGO_CONNECT_RETRY_DELAY,
    )
    embedder = OpenRouterEmbedder(
        api_key=settings.OPENROUTER_API_KEY.get_secret_value(),
        model=settings.EMBEDDING_MODEL,
        base_url=settings.OPENROUTER_BASE_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    rag = RAGService(store, embedder)
    chat = ChatService(rag, build_chat_model(settings), top_k=settings.RAG_TOP_K, history_limit=settings.CHAT_HISTORY_LIMIT)
    logger.info("Application context ready (embedding model: %s, top_k=%d, history_limit=%d)", embedder.model, settings.RAG_TOP_K, settings.CHAT_HISTORY_LIMIT)
    return AppContext(store=store, embedder=embedder, chat=chat, ingestion=IngestionService(store, embedder))


def get_context(request: Request) -> AppContext:
    """FastAPI dependency: the context built at startup."""
    return request.app.state.context

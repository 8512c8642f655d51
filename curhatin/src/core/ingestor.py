"""
Curhatin - Ingestion
=====================
Embeds a reference document and persists it to the knowledge store.

Flow: validate → embed content → build ``KnowledgeDocument`` (uuid4 id,
UTC timestamp) → ``insert_one``.  Embedding and store failures are
propagated unchanged; the API layer turns them into 500 responses.

Usage:
    service = IngestionService(store, embedder)
    doc_id = await service.ingest("Anxiety Coping", "breathing exercises help", "general")
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone

from curhatin.src.core.embeddings import Embedder
from curhatin.src.database.knowledge_store import KnowledgeDocument, KnowledgeStore
from curhatin.src.utils.errors import ValidationError
from curhatin.src.utils.logger import get_logger

logger = get_logger(__name__)


class IngestionService:
    """
    Parameters
    ----------
    store
        Destination ``KnowledgeStore``.
    embedder
        ``Embedder`` used for the document content.
    """

    __slots__ = ("_store", "_embedder")

    def __init__(self, store: KnowledgeStore, embedder: Embedder) -> None:
        self._store = store
        self._embedder = embedder


    async def ingest(self, title: str, content: str, category: str) -> str:
        """
        Store one document and return its new id.

        Raises
        ------
        ValidationError
            *content* is blank.
        EmbeddingError
            The content could not be embedded.
        StoreError
            The insert failed.
        """
        if not content.strip():
            raise ValidationError("Content cannot be empty")

        t_start = time.perf_counter()
        embedding = await self._embedder.embed_query(content)

        document = KnowledgeDocument(
            id=str(uuid.uuid4()),
            title=title,
            content=content,
            category=category,
            embedding=embedding,
            created_at=datetime.now(timezone.utc),
        )
        await self._store.insert_one(document)

        logger.info("[INGEST] Ingested document: %s ('%s', %d-dim, %.1fms)", document.id, title[:50], len(embedding), (time.perf_counter() - t_start) * 1000)
        return document.id

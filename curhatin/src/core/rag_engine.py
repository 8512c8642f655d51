"""
Curhatin - RAG Engine
======================
Retrieval-augmentation core: finds the stored reference documents most
similar to a user message and folds them into the system prompt.

Flow (``RAGService.retrieve_context``)
--------------------------------------
    1. Embed the query          ┐ issued concurrently, neither
    2. Fetch every document     ┘ depends on the other
    3. Score each document (cosine similarity)
    4. Sort descending
    5. Drop scores below ``MIN_SIMILARITY``
    6. Keep the first ``top_k``

Failures surface as ``EmbeddingFailed`` or ``StoreFailed``.  Retrieval is
best-effort: ``ChatService`` catches ``RetrievalError`` and continues
with the unaugmented prompt.

``RAGService`` holds no request-scoped state and is safe for concurrent
use.  The scan is O(n) in the number of stored documents.

Usage:
    rag = RAGService(store, embedder)
    context = await rag.retrieve_context("I feel anxious", top_k=3)
    prompt = rag.augment_prompt(get_system_prompt("general"), context)
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

from curhatin.config.prompt_templates import REFERENCE_DOCUMENT_TEMPLATE, REFERENCE_SECTION_TEMPLATE
from curhatin.src.core.embeddings import Embedder
from curhatin.src.core.similarity import rank
from curhatin.src.database.knowledge_store import KnowledgeDocument, KnowledgeStore
from curhatin.src.utils.errors import EmbeddingError, EmbeddingFailed, StoreError, StoreFailed
from curhatin.src.utils.logger import get_logger

logger = get_logger(__name__)

MIN_SIMILARITY = 0.3


@dataclass(frozen=True, slots=True)
class RetrievedDocument:
    """A stored document projected for prompting, with its similarity score."""

    title: str
    content: str
    category: str
    similarity: float


class RAGService:
    """
    Orchestrates embedding, full-scan ranking, and prompt augmentation.

    Parameters
    ----------
    store
        Any ``KnowledgeStore`` (``MongoKnowledgeStore`` in production).
    embedder
        Any ``Embedder`` (``OpenRouterEmbedder`` in production).
    """

    __slots__ = ("_store", "_embedder")

    def __init__(self, store: KnowledgeStore, embedder: Embedder) -> None:
        self._store = store
        self._embedder = embedder


    async def retrieve_context(self, query: str, top_k: int) -> list[RetrievedDocument]:
        """
        Return at most *top_k* documents scoring at least ``MIN_SIMILARITY``.

        Raises
        ------
        ValueError
            If *top_k* is not positive.
        EmbeddingFailed
            The query could not be embedded.
        StoreFailed
            The document store could not be read.
        """
        if top_k < 1:
            raise ValueError(f"top_k must be ≥ 1, got {top_k}")

        t_start = time.perf_counter()
        embedded, fetched = await asyncio.gather(self._embedder.embed_query(query), self._store.find_all(), return_exceptions=True)

        if isinstance(embedded, BaseException):
            if isinstance(embedded, EmbeddingError):
                raise EmbeddingFailed(f"Query embedding failed: {embedded}", cause=embedded) from embedded
            raise embedded
        if isinstance(fetched, BaseException):
            if isinstance(fetched, StoreError):
                raise StoreFailed(f"Document fetch failed: {fetched}", cause=fetched) from fetched
            raise fetched

        documents: list[KnowledgeDocument] = fetched
        ranked = rank(embedded, ((doc, doc.embedding) for doc in documents))

        results = [
            RetrievedDocument(title=doc.title, content=doc.content, category=doc.category, similarity=score)
            for doc, score in ranked
            if score >= MIN_SIMILARITY
        ][:top_k]

        elapsed_ms = (time.perf_counter() - t_start) * 1000
        logger.debug("[RAG] Retrieved %d/%d relevant documents in %.1fms (top_k=%d, threshold=%.2f)", len(results), len(documents), elapsed_ms, top_k, MIN_SIMILARITY)
        return results


    @staticmethod
    def augment_prompt(base_prompt: str, context: list[RetrievedDocument]) -> str:
        """
        Append a numbered "Reference Knowledge Base" section to *base_prompt*.

        An empty *context* returns *base_prompt* unchanged, so no empty
        reference section ever reaches the model.
        """
        if not context:
            return base_prompt

        documents = "".join(
            REFERENCE_DOCUMENT_TEMPLATE.format(index=i, category=doc.category, title=doc.title, content=doc.content)
            for i, doc in enumerate(context, 1)
        )
        return REFERENCE_SECTION_TEMPLATE.format(base_prompt=base_prompt, documents=documents)

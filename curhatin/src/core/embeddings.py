"""
Curhatin - Embedding Client
============================
Turns text into a fixed-length vector through an OpenAI-compatible
``/embeddings`` endpoint (OpenRouter by default).

Wire contract::

    POST {base_url}/embeddings
    Authorization: Bearer <key>
    {"model": "<model>", "input": "<text>"}

    200 → {"data": [{"embedding": [0.1, ...]}, ...], ...}

Every failure is raised as a subclass of ``EmbeddingError``:
transport problems, non-2xx answers, and payloads without an
embedding.  No retry is performed.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from curhatin.src.utils.errors import EmbeddingMalformedResponse, EmbeddingTransportError, EmbeddingUpstreamError
from curhatin.src.utils.logger import get_logger

logger = get_logger(__name__)

EmbeddingVector = list[float]


@runtime_checkable
class Embedder(Protocol):
    """Anything that can produce embedding vectors from text."""

    async def embed_query(self, text: str) -> EmbeddingVector: ...

    async def embed_documents(self, texts: list[str]) -> list[EmbeddingVector]: ...


# ── Response payload ───────────────────────────────────────────────────


class _EmbeddingData(BaseModel):
    embedding: list[float]


class _EmbeddingResponse(BaseModel):
    data: list[_EmbeddingData]


class OpenRouterEmbedder:
    """
    Async embedding client over ``httpx``.

    Parameters
    ----------
    api_key
        Bearer token for the embedding API.
    model
        Embedding model identifier sent with every request.
    base_url
        API root; ``/embeddings`` is appended.
    timeout
        Request-level timeout in seconds.  Expiry is a transport error.
    client
        Optional pre-built ``httpx.AsyncClient`` (tests inject one backed
        by ``httpx.MockTransport``).
    """

    __slots__ = ("_api_key", "_model", "_url", "_client")

    def __init__(self, api_key: str, model: str, base_url: str, timeout: float = 30.0, client: httpx.AsyncClient | None = None) -> None:
        self._api_key = api_key
        self._model = model
        self._url = f"{base_url.rstrip('/')}/embeddings"
        self._client = client or httpx.AsyncClient(timeout=timeout)


    @property
    def model(self) -> str:
        return self._model


    async def embed_query(self, text: str) -> EmbeddingVector:
        """
        Embed a single text.

        Raises
        ------
        EmbeddingTransportError
            Connection failure or timeout.
        EmbeddingUpstreamError
            Non-2xx answer; carries the status code and body text.
        EmbeddingMalformedResponse
            Body is not the expected JSON or holds no embedding.
        """
        try:
            response = await self._client.post(
                self._url,
                headers={"Authorization": f"Bearer {self._api_key}", "Content-Type": "application/json"},
                json={"model": self._model, "input": text},
            )
        except httpx.TransportError as exc:
            logger.error("[EMBED] Failed to call embedding API: %s", exc)
            raise EmbeddingTransportError(f"Failed to call embedding API: {exc}") from exc

        if not response.is_success:
            body = response.text
            logger.error("[EMBED] Embedding API error: %d - %s", response.status_code, body[:200])
            raise EmbeddingUpstreamError(f"Embedding API error: {response.status_code} - {body}", status_code=response.status_code, body=body)

        try:
            payload = _EmbeddingResponse.model_validate_json(response.content)
        except PydanticValidationError as exc:
            raise EmbeddingMalformedResponse(f"Failed to parse embedding response: {exc}") from exc

        if not payload.data or not payload.data[0].embedding:
            raise EmbeddingMalformedResponse("No embedding returned")

        vector = payload.data[0].embedding
        logger.debug("[EMBED] %d-dim embedding for %d chars (%s)", len(vector), len(text), self._model)
        return vector


    async def embed_documents(self, texts: list[str]) -> list[EmbeddingVector]:
        """Embed several texts, one request each, stopping at the first failure."""
        return [await self.embed_query(text) for text in texts]


    async def aclose(self) -> None:
        """Release the underlying HTTP connection pool."""
        await self._client.aclose()


    def __repr__(self) -> str:
        return f"OpenRouterEmbedder(model='{self._model}', url='{self._url}')"

"""
Curhatin - Error Taxonomy
==========================
Every failure the service reports is a ``CurhatinError`` carrying the
HTTP status the API layer should answer with.

Hierarchy::

    CurhatinError
    ├── ValidationError                 (400)  empty required field
    ├── StoreError                      (500)  MongoDB failure
    ├── EmbeddingError                  (500)  embedding API
    │   ├── EmbeddingTransportError          network / timeout
    │   ├── EmbeddingUpstreamError           non-2xx status
    │   └── EmbeddingMalformedResponse       unexpected payload
    ├── ChatCompletionError             (500)  chat-completion API
    │   ├── ChatTransportError
    │   ├── ChatUpstreamError
    │   └── ChatMalformedResponse
    └── RetrievalError                  (500)  RAG orchestration
        ├── EmbeddingFailed
        └── StoreFailed

``TransportError``, ``UpstreamError`` and ``MalformedResponse`` are mixin
bases shared by both remote APIs, so callers can catch a failure *kind*
without caring which API produced it.
"""

from __future__ import annotations


class CurhatinError(Exception):
    """Base class for application errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(CurhatinError):
    """Raised when a required field is empty."""

    status_code = 400


class StoreError(CurhatinError):
    """Raised when the document store cannot be read or written."""


# ── Failure kinds shared by the remote APIs ────────────────────────────


class TransportError(CurhatinError):
    """Network-level failure: connection refused, DNS, timeout."""


class UpstreamError(CurhatinError):
    """The remote API answered with a non-success status."""

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.upstream_status = status_code
        self.body = body


class MalformedResponse(CurhatinError):
    """The remote API answered 2xx but the payload had the wrong shape."""


# ── Embedding API ──────────────────────────────────────────────────────


class EmbeddingError(CurhatinError):
    """Opaque failure of the embedding client."""


class EmbeddingTransportError(EmbeddingError, TransportError):
    pass


class EmbeddingUpstreamError(EmbeddingError, UpstreamError):
    pass


class EmbeddingMalformedResponse(EmbeddingError, MalformedResponse):
    pass


# ── Chat-completion API ────────────────────────────────────────────────


class ChatCompletionError(CurhatinError):
    """Opaque failure of the chat-completion client."""


class ChatTransportError(ChatCompletionError, TransportError):
    pass


class ChatUpstreamError(ChatCompletionError, UpstreamError):
    pass


class ChatMalformedResponse(ChatCompletionError, MalformedResponse):
    pass


# ── Retrieval ──────────────────────────────────────────────────────────


class RetrievalError(CurhatinError):
    """Retrieval-augmentation failed; chat may continue unaugmented."""

    def __init__(self, message: str, cause: CurhatinError | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class EmbeddingFailed(RetrievalError):
    pass


class StoreFailed(RetrievalError):
    pass

"""
Curhatin - API Routes
======================
Thin controllers: each handler reads the request, delegates to a
service from the injected ``AppContext``, and maps the error taxonomy
onto status codes and response bodies.

    GET  /health       → liveness + MongoDB reachability
    POST /api/chat     → one chat turn (RAG best-effort)
    POST /api/ingest   → embed and store a reference document
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from curhatin.src.api.context import AppContext, get_context
from curhatin.src.api.schemas import ChatRequest, ChatResponse, HealthResponse, IngestRequest, IngestResponse
from curhatin.src.utils.errors import ChatCompletionError, ChatMalformedResponse, ChatTransportError, EmbeddingError, StoreError, ValidationError
from curhatin.src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["ai-mental-chatbot"])


def _chat_error(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ChatResponse(response="", error=error).model_dump(exclude_none=True))


def _ingest_error(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=IngestResponse(success=False, id="", error=error).model_dump(exclude_none=True))


@router.get("/health", response_model=HealthResponse)
async def health_check(ctx: AppContext = Depends(get_context)) -> HealthResponse:
    """Health check endpoint."""
    try:
        await ctx.store.ping()
        db_status = "connected"
    except StoreError as exc:
        logger.warning("[HEALTH] MongoDB ping failed: %s", exc)
        db_status = "disconnected"

    return HealthResponse(status="ok", message=f"AI Mental Chatbot Backend is running. MongoDB: {db_status}")


@router.post(
    "/api/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ChatResponse, "description": "Bad request"}, 500: {"model": ChatResponse, "description": "Internal server error"}},
)
async def chat(payload: ChatRequest, ctx: AppContext = Depends(get_context)) -> ChatResponse | JSONResponse:
    """Chat with the AI companion."""
    try:
        reply = await ctx.chat.chat(payload.message, payload.category, payload.conversation_history)
    except ValidationError as exc:
        return _chat_error(status.HTTP_400_BAD_REQUEST, str(exc))
    except ChatTransportError:
        return _chat_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to connect to AI service")
    except ChatMalformedResponse:
        return _chat_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process AI response")
    except ChatCompletionError:
        return _chat_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "AI service temporarily unavailable")

    return ChatResponse(response=reply.response, sources=reply.sources)


@router.post(
    "/api/ingest",
    response_model=IngestResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": IngestResponse, "description": "Bad request"}, 500: {"model": IngestResponse, "description": "Internal server error"}},
)
async def ingest_document(payload: IngestRequest, ctx: AppContext = Depends(get_context)) -> IngestResponse | JSONResponse:
    """Embed and store a reference document."""
    try:
        doc_id = await ctx.ingestion.ingest(payload.title, payload.content, payload.category)
    except ValidationError as exc:
        return _ingest_error(status.HTTP_400_BAD_REQUEST, str(exc))
    except EmbeddingError as exc:
        logger.error("[INGEST] Failed to generate embedding: %s", exc)
        return _ingest_error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to generate embedding: {exc}")
    except StoreError as exc:
        logger.error("[INGEST] Failed to insert document: %s", exc)
        return _ingest_error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to store document: {exc}")

    return IngestResponse(success=True, id=doc_id)

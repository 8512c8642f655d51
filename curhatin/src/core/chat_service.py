"""
Curhatin - Chat Service
========================
Builds the message list for one chat turn and calls the chat-completion
API through LangChain's ``ChatOpenAI`` pointed at OpenRouter.

Message order sent to the model::

    [system: category prompt (+ reference knowledge)]
    [last CHAT_HISTORY_LIMIT history turns, oldest first]
    [user: new message]

Retrieval is best-effort: a ``RetrievalError`` is logged and the turn
proceeds with the plain category prompt.  Completion failures are
raised as ``ChatCompletionError`` subclasses; none are retried.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

import httpx
import openai
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from curhatin.config.prompt_templates import FALLBACK_REPLY, get_system_prompt
from curhatin.config.settings import Settings
from curhatin.src.core.rag_engine import RAGService
from curhatin.src.utils.errors import ChatMalformedResponse, ChatTransportError, ChatUpstreamError, RetrievalError, ValidationError
from curhatin.src.utils.logger import get_logger

logger = get_logger(__name__)


class ConversationMessage(BaseModel):
    """One prior turn supplied by the client."""

    role: Literal["system", "user", "assistant"] = Field(..., examples=["user"])
    content: str = Field(..., examples=["saya merasa cemas"])
    timestamp: datetime | None = None


@dataclass(frozen=True, slots=True)
class ChatReply:
    response: str
    sources: list[str] | None = None


_ROLE_TO_MESSAGE: dict[str, type[BaseMessage]] = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def build_chat_model(settings: Settings, http_async_client: httpx.AsyncClient | None = None) -> BaseChatModel:
    """
    Create the OpenRouter-backed chat model (retries disabled).

    The token cap travels as ``max_tokens`` in the request body;
    ``ChatOpenAI`` would otherwise rename it to ``max_completion_tokens``.
    """
    from langchain_openai import ChatOpenAI

    llm = ChatOpenAI(
        model=settings.OPENROUTER_MODEL,
        api_key=settings.OPENROUTER_API_KEY,
        base_url=settings.OPENROUTER_BASE_URL,
        temperature=settings.LLM_TEMPERATURE,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        max_retries=0,
        default_headers={"HTTP-Referer": settings.APP_REFERER, "X-Title": settings.APP_TITLE},
        extra_body={"max_tokens": settings.LLM_MAX_TOKENS},
        http_async_client=http_async_client,
    )
    logger.info("LLM initialised: %s (temperature=%.1f, max_tokens=%d)", settings.OPENROUTER_MODEL, settings.LLM_TEMPERATURE, settings.LLM_MAX_TOKENS)
    return llm


class ChatService:
    """
    One chat turn: retrieve → augment → assemble history → generate.

    Parameters
    ----------
    rag
        Retrieval-augmentation engine.
    llm
        LangChain chat model; only ``ainvoke`` is used.
    top_k
        Reference documents requested per turn.
    history_limit
        Prior turns forwarded to the model.
    """

    __slots__ = ("_rag", "_llm", "_top_k", "_history_limit")

    def __init__(self, rag: RAGService, llm: BaseChatModel, top_k: int = 3, history_limit: int = 10) -> None:
        self._rag = rag
        self._llm = llm
        self._top_k = top_k
        self._history_limit = history_limit


    async def chat(self, message: str, category: str | None = None, history: list[ConversationMessage] | None = None) -> ChatReply:
        """
        Generate the assistant reply for *message*.

        Raises
        ------
        ValidationError
            *message* is blank.  Nothing is called in that case.
        ChatCompletionError
            The completion API failed (transport, upstream, or payload).
        """
        if not message.strip():
            raise ValidationError("Message cannot be empty")

        t_start = time.perf_counter()
        system_prompt, sources = await self._build_system_prompt(message, category)
        messages = self._build_messages(system_prompt, history or [], message)

        reply = await self._generate(messages)

        logger.info("[CHAT] Reply generated in %.1fms (%d chars, %d sources, %d messages sent)", (time.perf_counter() - t_start) * 1000, len(reply), len(sources or []), len(messages))
        return ChatReply(response=reply, sources=sources)


    async def _build_system_prompt(self, message: str, category: str | None) -> tuple[str, list[str] | None]:
        """Category prompt, augmented when retrieval succeeds and finds something."""
        base_prompt = get_system_prompt(category)
        try:
            context = await self._rag.retrieve_context(message, self._top_k)
        except RetrievalError as exc:
            logger.warning("[CHAT] RAG retrieval failed, using base prompt: %s", exc)
            return base_prompt, None

        sources = [doc.title for doc in context]
        return self._rag.augment_prompt(base_prompt, context), sources or None


    def _build_messages(self, system_prompt: str, history: list[ConversationMessage], message: str) -> list[BaseMessage]:
        recent = history[-self._history_limit:]
        messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
        messages.extend(_ROLE_TO_MESSAGE[turn.role](content=turn.content) for turn in recent)
        messages.append(HumanMessage(content=message))
        return messages


    async def _generate(self, messages: list[BaseMessage]) -> str:
        """Call the model and map client exceptions onto the error taxonomy."""
        try:
            response = await self._llm.ainvoke(messages)
        except IndexError:
            # No choices in the completion.
            logger.warning("[CHAT] Completion returned no choices; using fallback reply.")
            return FALLBACK_REPLY
        except openai.APIConnectionError as exc:
            logger.error("[CHAT] Failed to call chat-completion API: %s", exc)
            raise ChatTransportError(f"Failed to connect to AI service: {exc}") from exc
        except openai.APIStatusError as exc:
            body = exc.response.text if exc.response is not None else ""
            logger.error("[CHAT] Chat-completion API error: %d - %s", exc.status_code, body[:200])
            raise ChatUpstreamError(f"AI service error: {exc.status_code}", status_code=exc.status_code, body=body) from exc
        except openai.APIError as exc:
            logger.error("[CHAT] Chat-completion API returned an unusable response: %s", exc, exc_info=True)
            raise ChatMalformedResponse(f"Failed to process AI response: {exc}") from exc
        except (KeyError, TypeError, ValueError) as exc:
            # Raised by ChatOpenAI while parsing: KeyError for a missing
            # "choices", TypeError for null "choices", ValueError for an
            # "error" object in a 200 body.
            logger.error("[CHAT] Failed to parse chat-completion response: %s", exc, exc_info=True)
            raise ChatMalformedResponse(f"Failed to process AI response: {exc}") from exc

        return _message_text(response) or FALLBACK_REPLY


def _message_text(message: BaseMessage) -> str:
    """Flatten string or content-block message content into plain text."""
    if isinstance(message.content, str):
        return message.content
    parts: list[str] = []
    for block in message.content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)

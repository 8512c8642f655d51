"""Request / response bodies for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from curhatin.src.core.chat_service import ConversationMessage


class HealthResponse(BaseModel):
    status: str
    message: str


class ChatRequest(BaseModel):
    message: str = Field(..., examples=["Halo, saya merasa cemas"])
    category: str | None = Field(default=None, examples=["general"])
    conversation_history: list[ConversationMessage] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str
    error: str | None = None
    sources: list[str] | None = None


class IngestRequest(BaseModel):
    title: str
    content: str
    category: str


class IngestResponse(BaseModel):
    success: bool
    id: str
    error: str | None = None

"""
Curhatin - Centralized Configuration
=====================================
Uses ``pydantic-settings`` (``BaseSettings``) to load *all* configuration
from environment variables and the project-level ``.env`` file.

Security
--------
- ``OPENROUTER_API_KEY`` is typed as ``SecretStr`` and has **no default
  value**.  If the key is missing at startup, Pydantic will raise a
  ``ValidationError`` with a clear error message.  The raw value is never
  exposed in repr, logs, or tracebacks.
- ``MONGO_URI`` is also ``SecretStr`` — connection strings contain
  credentials and must never leak into logs.

Startup
-------
``MONGO_CONNECT_RETRIES`` / ``MONGO_CONNECT_RETRY_DELAY`` bound the only
retry loop in the service: the MongoDB connection attempt at boot.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """
    Application-wide settings.

    Every field is loaded from environment variables (or ``.env``).
    Fields *without* a default are **required** — the app will refuse
    to start until they are provided.

    Attributes
    ----------
    OPENROUTER_API_KEY : SecretStr
        Bearer token for the OpenRouter embedding and chat APIs.  **Required.**
    OPENROUTER_MODEL : str
        Chat-completion model identifier.
    OPENROUTER_BASE_URL : str
        Base URL of the OpenAI-compatible API (``/embeddings`` and
        ``/chat/completions`` live below it).
    EMBEDDING_MODEL : str
        Embedding model identifier; fixes the vector dimensionality.
    MONGO_URI : SecretStr
        MongoDB connection string.  Contains credentials — never log raw value.
    MONGO_DB_NAME : str
        Database holding the knowledge collection.
    MONGO_COLLECTION : str
        Collection name for knowledge documents.
    ENV : Literal["dev", "prod"]
        Environment mode controlling logging verbosity.
    HTTP_TIMEOUT_SECONDS : float
        Request-level timeout applied to every outbound API call.
    RAG_TOP_K : int
        Maximum number of reference documents injected per chat turn.
    CHAT_HISTORY_LIMIT : int
        Number of prior conversation turns forwarded to the LLM.
    """

    # ── Environment Mode ───────────────────────────────────────────────
    ENV: Literal["dev", "prod"] = "dev"
    PORT: int = 3000

    # ── API Keys (REQUIRED — no default) ───────────────────────────────
    OPENROUTER_API_KEY: SecretStr

    # ── OpenRouter ─────────────────────────────────────────────────────
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_MODEL: str = "openai/gpt-4o-mini"
    EMBEDDING_MODEL: str = "openai/text-embedding-3-small"
    APP_REFERER: str = "https://Curhatin.app"
    APP_TITLE: str = "Curhatin"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # ── LLM Generation ─────────────────────────────────────────────────
    LLM_MAX_TOKENS: int = 500
    LLM_TEMPERATURE: float = 0.7

    # ── Retrieval / Chat ───────────────────────────────────────────────
    RAG_TOP_K: int = 3
    CHAT_HISTORY_LIMIT: int = 10

    # ── MongoDB ────────────────────────────────────────────────────────
    # MONGODB_URI / MONGODB_DATABASE are accepted for existing deployments.
    MONGO_URI: SecretStr = Field(default=SecretStr("mongodb://localhost:27017"), validation_alias=AliasChoices("MONGO_URI", "MONGODB_URI"))
    MONGO_DB_NAME: str = Field(default="mental_chatbot", validation_alias=AliasChoices("MONGO_DB_NAME", "MONGODB_DATABASE"))
    MONGO_COLLECTION: str = "knowledge"
    MONGO_CONNECT_RETRIES: int = 5
    MONGO_CONNECT_RETRY_DELAY: float = 5.0

    # ── Validators ─────────────────────────────────────────────────────

    @field_validator("RAG_TOP_K", "CHAT_HISTORY_LIMIT", "MONGO_CONNECT_RETRIES")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be ≥ 1, got {v}")
        return v


    @field_validator("LLM_TEMPERATURE")
    @classmethod
    def _temperature_range(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"LLM_TEMPERATURE must be 0.0–2.0, got {v}")
        return v


    @field_validator("PORT", mode="before")
    @classmethod
    def _empty_port(cls, v: object) -> object:
        # Hosting platforms sometimes export PORT="".
        if v is None or (isinstance(v, str) and not v.strip()):
            return 3000
        return v

    # ── Pydantic Settings Configuration ────────────────────────────────
    model_config = SettingsConfigDict(env_file=_PROJECT_ROOT / ".env", env_file_encoding="utf-8", extra="ignore")


# ── Singleton Instance ─────────────────────────────────────────────────
# Import this throughout the project:
#     from curhatin.config.settings import settings
settings = Settings()

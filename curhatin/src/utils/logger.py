"""
Curhatin - Logging
===================
Logger factory plus the small redaction helpers every module uses
before a credential-bearing value reaches a log line or the console.

Verbosity follows ``settings.ENV``:
  • ``"dev"``  → DEBUG
  • ``"prod"`` → WARNING

Tags in square brackets mark the subsystem (``[RAG]``, ``[CHAT]``,
``[EMBED]``, ``[STORE]``, ``[INGEST]``, ``[HEALTH]``).

Usage:
    from curhatin.src.utils.logger import get_logger, redact_uri
    logger = get_logger(__name__)
    logger.info("[STORE] Connecting to %s", redact_uri(uri))
"""

import logging
import sys

from curhatin.config.settings import settings

_LEVELS = {"dev": logging.DEBUG, "prod": logging.WARNING}
_DEFAULT_LEVEL = _LEVELS.get(settings.ENV, logging.INFO)

_FORMATTER = logging.Formatter(fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Return the named logger, attaching a stdout handler on first use.

    Parameters
    ----------
    name
        Usually ``__name__``.
    level
        Override for the ``settings.ENV`` default.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    resolved = level if level is not None else _DEFAULT_LEVEL
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved)
    handler.setFormatter(_FORMATTER)

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def uvicorn_log_level() -> str:
    """Uvicorn's ``log_level`` name matching the application's verbosity."""
    return logging.getLevelName(_DEFAULT_LEVEL).lower()


def redact_uri(uri: str) -> str:
    """``mongodb://user:pw@host/db`` → ``mongodb://***@host/db``."""
    scheme, sep, rest = uri.partition("://")
    if not sep:
        scheme, rest = "", uri
    if "@" not in rest:
        return uri
    host = rest.rsplit("@", 1)[1]
    return f"{scheme}{sep}***@{host}"


def mask_key(value: str) -> str:
    """Keep only the last four characters of an API key."""
    return f"****{value[-4:]}" if len(value) > 8 else "****"

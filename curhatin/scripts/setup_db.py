"""
Curhatin - Database Setup & Seeding Script
===========================================
CLI entry point that orchestrates:
    1. Load settings and validate ``OPENROUTER_API_KEY`` (fail-fast).
    2. Connect to MongoDB (bounded retry) and optionally drop the
       knowledge collection.
    3. Create the ``category`` / ``created_at`` indexes.
    4. Optionally ingest a JSON seed file through ``IngestionService``.
    5. Print a structured execution summary.

Seed file format::

    [
        {"title": "Anxiety Coping", "content": "breathing exercises help", "category": "general"},
        ...
    ]

Flags:
    --seed FILE   Ingest the documents listed in FILE.
    --drop        Drop the knowledge collection before setup.
    --drop-only   Drop the knowledge collection and exit.

Usage:
    python -m curhatin.scripts.setup_db
    python -m curhatin.scripts.setup_db --seed data/seed.json
    python -m curhatin.scripts.setup_db --drop --seed data/seed.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from curhatin.config.settings import Settings


# ── CLI Argument Parsing ───────────────────────────────────────────────

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="setup_db", description="Curhatin — Initialise the knowledge collection and optionally seed it.")
    parser.add_argument("--seed", type=Path, default=None, help="JSON file with a list of {title, content, category} objects to ingest.")
    parser.add_argument("--drop", action="store_true", default=False, help="Drop the knowledge collection before setup.")
    parser.add_argument("--drop-only", action="store_true", default=False, help="Drop the knowledge collection and exit.")
    return parser.parse_args(argv)


def load_seed_file(path: Path) -> list[dict[str, str]]:
    """Read and validate a seed file; raises ``ValueError`` on bad shape."""
    entries = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(entries, list):
        raise ValueError(f"{path}: expected a JSON list, got {type(entries).__name__}")

    required = ("title", "content", "category")
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or any(not isinstance(entry.get(key), str) for key in required):
            raise ValueError(f"{path}: entry {i} must be an object with string fields {', '.join(required)}")
    return entries


# ── Main Orchestration ─────────────────────────────────────────────────

async def _run(args: argparse.Namespace) -> int:
    t_start = time.perf_counter()

    try:
        from curhatin.config.settings import settings
    except Exception as exc:
        print("\n[FATAL] Configuration error — check your .env file:\n")
        print(f"  {exc}")
        print()
        return 1

    from curhatin.src.core.embeddings import OpenRouterEmbedder
    from curhatin.src.core.ingestor import IngestionService
    from curhatin.src.database.knowledge_store import MongoKnowledgeStore
    from curhatin.src.utils.errors import CurhatinError, StoreError
    from curhatin.src.utils.logger import get_logger

    logger = get_logger(__name__)
    _print_header(settings)

    seed: list[dict[str, str]] = []
    if args.seed is not None:
        try:
            seed = load_seed_file(args.seed)
        except (OSError, ValueError) as exc:
            logger.error("Cannot read seed file: %s", exc)
            return 1

    try:
        store = await MongoKnowledgeStore.connect(settings.MONGO_URI.get_secret_value(), settings.MONGO_DB_NAME, collection_name=settings.MONGO_COLLECTION, retries=settings.MONGO_CONNECT_RETRIES, retry_delay=settings.MONGO_CONNECT_RETRY_DELAY)
    except StoreError:
        return 1

    embedder = OpenRouterEmbedder(api_key=settings.OPENROUTER_API_KEY.get_secret_value(), model=settings.EMBEDDING_MODEL, base_url=settings.OPENROUTER_BASE_URL, timeout=settings.HTTP_TIMEOUT_SECONDS)
    ingested = 0
    failed = 0
    try:
        if args.drop or args.drop_only:
            await store.drop()
            if args.drop_only:
                logger.info("--drop-only: Collection dropped. Exiting.")
                _print_footer(0, 0, await store.count(), time.perf_counter() - t_start)
                return 0

        await store.ensure_indexes()

        service = IngestionService(store, embedder)
        for entry in seed:
            try:
                doc_id = await service.ingest(entry["title"], entry["content"], entry["category"])
            except CurhatinError as exc:
                failed += 1
                logger.error("Failed to ingest '%s': %s", entry["title"], exc)
                continue
            ingested += 1
            logger.info("Ingested '%s' → %s", entry["title"], doc_id)

        total = await store.count()
    except StoreError as exc:
        logger.error("Setup aborted: %s", exc)
        return 1
    finally:
        await embedder.aclose()
        store.close()

    _print_footer(ingested, failed, total, time.perf_counter() - t_start)
    return 0 if failed == 0 else 2


def main(argv: list[str] | None = None) -> None:
    sys.exit(asyncio.run(_run(_parse_args(argv))))


# ── Pretty-print helpers ──────────────────────────────────────────────

def _print_header(settings: Settings) -> None:
    from curhatin.src.utils.logger import mask_key, redact_uri

    print()
    print("=" * 60)
    print("  CURHATIN — Knowledge Base Setup")
    print("=" * 60)
    print(f"  Environment  : {settings.ENV}")
    print(f"  Embedding    : {settings.EMBEDDING_MODEL}")
    print(f"  MongoDB      : {redact_uri(settings.MONGO_URI.get_secret_value())} (db: {settings.MONGO_DB_NAME}, collection: {settings.MONGO_COLLECTION})")
    print(f"  API Key      : {mask_key(settings.OPENROUTER_API_KEY.get_secret_value())}")
    print("=" * 60)
    print()


def _print_footer(ingested: int, failed: int, total: int, elapsed: float) -> None:
    print()
    print("=" * 60)
    print("  EXECUTION SUMMARY")
    print("-" * 60)
    print(f"  Documents ingested   : {ingested}")
    print(f"  Documents failed     : {failed}")
    print(f"  Collection size      : {total}")
    print(f"  Total elapsed        : {elapsed:>8.2f}s")
    print("=" * 60)
    print()


# ── Entry point ────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()

"""
Curhatin - Application Entry Point
===================================
FastAPI application factory.  The lifespan connects to MongoDB (with a
bounded retry), builds the shared ``AppContext``, and releases it on
shutdown.  CORS is open to any origin; Swagger UI lives at
``/swagger-ui`` with the schema at ``/api-docs/openapi.json``.

Run:
    uvicorn curhatin.src.main:app --port 3000
    python -m curhatin.src.main
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from curhatin.config.settings import settings
from curhatin.src.api.context import build_context
from curhatin.src.api.routes import router
from curhatin.src.utils.logger import get_logger, uvicorn_log_level

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the shared context on startup and close it on shutdown."""
    context = await build_context(settings)
    app.state.context = context
    logger.info("Server ready on port %d (Swagger UI at /swagger-ui)", settings.PORT)
    try:
        yield
    finally:
        await context.aclose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="AI Mental Chatbot Backend",
        description="Retrieval-augmented mental wellness chat API",
        version="0.1.0",
        docs_url="/swagger-ui",
        openapi_url="/api-docs/openapi.json",
        lifespan=lifespan,
    )
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("curhatin.src.main:app", host="0.0.0.0", port=settings.PORT, log_level=uvicorn_log_level())


if __name__ == "__main__":
    run()

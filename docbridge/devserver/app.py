"""FastAPI application factory for the development backend.

Serves the same contract as the hosted backend from in-memory storage so
the client can run locally and be integration-tested without external
services.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docbridge.devserver.routes import router
from docbridge.devserver.store import DocumentStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Log startup and drop stored documents on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info("Starting docbridge development backend...")
    yield
    app.state.store.clear()
    logger.info("Shutting down docbridge development backend...")


def create_app(store: DocumentStore | None = None) -> FastAPI:
    """Create and configure the development backend.

    Args:
        store: Document storage; a fresh empty store if omitted.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="docbridge development backend",
        description=(
            "In-memory stand-in for the document extraction and AI proxy "
            "backend. Extracts uploaded text, stores documents per user, and "
            "echoes prompts instead of calling an AI provider."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.store = store or DocumentStore()

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "docbridge-devserver"}

    return application


app = create_app()

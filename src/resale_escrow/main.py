"""FastAPI application entry point for the ticket resale escrow.

Lifecycle:
    1. Startup: Initialize logging, build the registry and its ledger.
    2. Running: Serve the REST API on a single Uvicorn process.
    3. Shutdown: Log a summary of what is still held in escrow.

Run with:
    uvicorn resale_escrow.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from resale_escrow import __version__
from resale_escrow.config import get_settings
from resale_escrow.logging_config import get_logger, setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    settings = get_settings()

    setup_logging(
        log_level=settings.app_log_level,
        json_logs=not settings.is_development,
    )
    logger = get_logger(__name__)
    logger.info(
        "app.starting",
        env=settings.app_env,
        debug=settings.app_debug,
    )

    from resale_escrow.api.deps import get_registry

    registry = get_registry()
    logger.info(
        "app.started",
        host=settings.app_host,
        port=settings.app_port,
        owner=registry.owner,
        deposit=registry.fee_schedule.deposit,
    )

    yield

    logger.info("app.shutting_down", open_listings=len(registry.list_open()))
    logger.info("app.stopped")


def create_app() -> FastAPI:
    """Application factory — creates and configures the FastAPI app."""
    settings = get_settings()

    app = FastAPI(
        title="Resale Escrow",
        description=(
            "Peer-to-peer ticket resale settled through per-transaction escrow."
        ),
        version=__version__,
        lifespan=lifespan,
        debug=settings.app_debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    from resale_escrow.api.middleware import setup_middleware

    setup_middleware(app)

    from resale_escrow.api.routes.admin import router as admin_router
    from resale_escrow.api.routes.health import router as health_router
    from resale_escrow.api.routes.ledger import router as ledger_router
    from resale_escrow.api.routes.listings import router as listings_router

    app.include_router(health_router)
    app.include_router(listings_router)
    app.include_router(admin_router)
    app.include_router(ledger_router)

    return app


# The app instance used by Uvicorn
app = create_app()

"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads templates and builds the orchestrator once
  - CORS middleware
  - Global exception handlers (KeyError → 404, ValueError → 400)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``triage-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from triage_db.engine import dispose_engine, get_engine
from triage_rulesets.cache import TimedCache
from triage_rulesets.interfaces import GuidanceGenerator
from triage_rulesets.orchestrator import GuidanceOrchestrator
from triage_rulesets.ruleset import TemplateStore

from triage_server.config import ServerSettings, load_settings
from triage_server.errors import (
    generic_error_handler,
    key_error_handler,
    value_error_handler,
)
from triage_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan: runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialise shared resources at startup, tear down on shutdown.

    Startup:
      1. Load YAML templates into a ``TemplateStore``
      2. Build the ``GuidanceOrchestrator`` around the configured generator
      3. Stash them on ``app.state`` for dependency injection

    Shutdown:
      1. Dispose the database engine's connection pool
    """
    settings: ServerSettings = app.state.settings

    # --- Load templates ---
    store = TemplateStore(template_dir=settings.template_dir)
    store.load()

    # --- Build orchestrator ---
    generator: GuidanceGenerator | None = app.state.generator
    if generator is None:
        logger.warning("No guidance generator configured; guidance requests will use fallbacks")
    orchestrator = GuidanceOrchestrator(generator, timeout=settings.generation_timeout)

    app.state.store = store
    app.state.orchestrator = orchestrator
    app.state.guidance_cache = TimedCache(ttl_seconds=settings.guidance_cache_ttl)

    yield

    # --- Shutdown ---
    await dispose_engine()
    logger.info("Database engine disposed")


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(
    settings: ServerSettings | None = None,
    generator: GuidanceGenerator | None = None,
) -> FastAPI:
    """Build and return the configured FastAPI application.

    Args:
        settings: server settings; read from the environment when omitted.
        generator: external text generator used for guidance.  Without
            one, guidance endpoints always serve the deterministic fallback.
    """
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Triage Guidance API Server",
        description="REST API for rule-driven symptom triage and guidance",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings and generator so the lifespan handler can read them
    app.state.settings = settings
    app.state.generator = generator

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    async def health() -> dict:
        """Readiness probe — verifies DB connectivity."""
        try:
            engine = get_engine()
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ok"}
        except Exception as exc:
            logger.error("Health check failed: %s", exc)
            return {"status": "error", "detail": str(exc)}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn triage_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``triage-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "triage_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )

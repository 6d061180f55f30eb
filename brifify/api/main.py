"""
Brifify Backend - FastAPI Application

Interviews a user about a software project and synthesizes a technical brief.
Provides:
- The question/answer interview loop backed by OpenAI
- Structured brief generation and per-user brief storage
- The token ledger that gates both, plus purchase fulfillment
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from brifify import __version__
from brifify.api.middleware import RequestIDMiddleware
from brifify.api.routes import briefs, health, interview, tokens, users, webhooks
from brifify.config import Settings, get_settings
from brifify.container import ServiceContainer, build_container
from brifify.db.client import ensure_schema
from brifify.kernel.http.errors import register_exception_handlers

_LOG_LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(settings: Settings) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
            if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _LOG_LEVEL_MAP.get(settings.log_level.lower(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    if getattr(app.state, "container", None) is not None:
        # Container injected by the caller, which also owns its shutdown.
        yield
        return

    settings = get_settings()
    logger.info(
        "Starting Brifify Backend",
        version=__version__,
        environment=settings.environment,
        storage_backend=settings.storage_backend,
    )

    if settings.storage_backend == "postgres":
        await ensure_schema(settings)

    container = await build_container(settings)
    app.state.container = container
    try:
        yield
    finally:
        logger.info("Shutting down Brifify Backend")
        await container.aclose()
        app.state.container = None


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    settings = container.settings if container is not None else get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Brifify API",
        description="AI interview loop that turns a project idea into a technical brief",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(interview.router, prefix="/api/v1")
    app.include_router(briefs.router, prefix="/api/v1")
    app.include_router(tokens.router, prefix="/api/v1")
    app.include_router(webhooks.router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Brifify API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app

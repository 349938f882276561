"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
the FirefliesError handler, and the v1 API router. Settings are resolved
once and passed in; the Fireflies gateway is built here only when an API key
is configured, so every route fails fast with "not configured" otherwise.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.firefeed.api import pages
from src.firefeed.api.errors import register_error_handlers
from src.firefeed.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.firefeed.api.v1 import health
from src.firefeed.api.v1.router import router as v1_router
from src.firefeed.config import Settings, get_settings
from src.firefeed.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.firefeed.transcripts.gateway import FirefliesGateway


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: configure logging and Sentry on startup."""
    settings: Settings = app.state.settings
    configure_structlog(settings)
    log = structlog.get_logger(__name__)

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    if app.state.gateway is None:
        log.warning("startup.fireflies_not_configured")
    log.info(
        "startup.complete",
        environment=settings.ENVIRONMENT.value,
        base_url=settings.BASE_URL,
    )

    yield

    log.info("shutdown.complete")


def build_gateway(settings: Settings) -> FirefliesGateway | None:
    """Build the gateway from settings, or None when no API key is set."""
    if not settings.fireflies_configured:
        return None
    return FirefliesGateway(
        api_key=settings.FIREFLIES_API_KEY.strip(),
        api_url=settings.FIREFLIES_API_URL,
        timeout=settings.FIREFLIES_TIMEOUT,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Fireflies Transcript Feed",
        version="0.1.0",
        description="Meeting transcripts from Fireflies.ai as JSON views and an RSS feed",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.gateway = build_gateway(settings)

    register_error_handlers(app)

    # Middleware is added in reverse order (last added = outermost)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    app.include_router(health.router)
    app.include_router(v1_router)
    app.include_router(pages.router)

    # Prometheus metrics endpoint (infrastructure route, outside v1 router)
    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()

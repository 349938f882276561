"""Prometheus metrics, Sentry integration, and upstream call tracking.

Provides:
- MetricsMiddleware: ASGI middleware for HTTP request metrics
- track_fireflies_call(): Context manager for Fireflies GraphQL call metrics
- init_sentry(): Initialize Sentry with request-aware tagging
- get_metrics_response(): Prometheus exposition for the /metrics route
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import sentry_sdk
from prometheus_client import REGISTRY, Counter, Histogram, generate_latest
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# ── HTTP Metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Upstream Metrics ─────────────────────────────────────────────────────────

fireflies_requests_total = Counter(
    "fireflies_requests_total",
    "Total Fireflies GraphQL requests",
    ["operation", "outcome"],
)

fireflies_request_duration_seconds = Histogram(
    "fireflies_request_duration_seconds",
    "Fireflies GraphQL request duration in seconds",
    ["operation"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


# ── Metrics Middleware ───────────────────────────────────────────────────────


class MetricsMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that records Prometheus metrics for every HTTP request.

    Records request count and duration per method/endpoint. Uses the matched
    route pattern (``/api/v1/transcripts/{transcript_id}``) rather than the
    raw path to keep label cardinality bounded. Skips the /metrics endpoint
    itself to avoid self-referential counting.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        route = request.scope.get("route")
        endpoint = getattr(route, "path", None) or request.url.path

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=str(response.status_code),
        ).inc()

        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response


# ── Upstream Call Helper ─────────────────────────────────────────────────────


@asynccontextmanager
async def track_fireflies_call(operation: str) -> AsyncGenerator[None, None]:
    """Context manager that tracks Fireflies call metrics.

    The outcome label is ``success`` or the exception class name
    (``RateLimitError``, ``GraphQLError``, ...). Exceptions are re-raised.

    Usage:
        async with track_fireflies_call("list_transcripts"):
            data = await gateway.execute(...)
    """
    start_time = time.perf_counter()
    outcome = "success"
    try:
        yield
    except Exception as exc:
        outcome = type(exc).__name__
        raise
    finally:
        fireflies_request_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )
        fireflies_requests_total.labels(operation=operation, outcome=outcome).inc()


# ── Sentry Integration ───────────────────────────────────────────────────────


def init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry SDK.

    Args:
        dsn: Sentry DSN string.
        environment: Deployment environment (development, staging, production).
    """
    traces_sample_rate = 0.1 if environment == "production" else 1.0

    def before_send(event: dict, hint: dict) -> dict | None:
        """Drop client-side errors (4xx) so only server faults are reported."""
        exc_info = hint.get("exc_info")
        if exc_info:
            status_code = getattr(exc_info[1], "status_code", 500)
            if isinstance(status_code, int) and status_code < 500:
                return None
        return event

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            StarletteIntegration(),
            FastApiIntegration(),
        ],
        before_send=before_send,
    )


# ── Metrics Endpoint ─────────────────────────────────────────────────────────


def get_metrics_response() -> Response:
    """Generate Prometheus exposition format response."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )

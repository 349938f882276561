"""HTTP rendering of transcript access errors.

JSON routes answer with ``{"error": "<reason>"}``; the RSS route answers with
the reason as plain text. Both use the status carried by the exception.
Server-side failures (5xx) are also reported to Sentry; the call is a no-op
when Sentry is not initialized.
"""

from __future__ import annotations

import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from src.firefeed.transcripts.exceptions import FirefliesError

logger = structlog.get_logger(__name__)


def _log_error(request: Request, exc: FirefliesError) -> None:
    log_method = logger.error if exc.status_code >= 500 else logger.warning
    log_method(
        "fireflies_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        message=exc.message,
    )
    # Handled errors never reach the Sentry integration on their own
    if exc.status_code >= 500:
        sentry_sdk.capture_exception(exc)


def error_json(request: Request, exc: FirefliesError) -> JSONResponse:
    _log_error(request, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def error_text(request: Request, exc: FirefliesError) -> PlainTextResponse:
    _log_error(request, exc)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def fireflies_error_handler(request: Request, exc: FirefliesError) -> JSONResponse:
    """Exception handler registered for FirefliesError on the app."""
    return error_json(request, exc)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FirefliesError, fireflies_error_handler)

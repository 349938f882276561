"""API middleware package."""

from src.firefeed.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]

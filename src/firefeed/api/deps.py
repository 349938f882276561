"""FastAPI dependency injection for settings and the Fireflies gateway.

``create_app`` resolves Settings once and stores them, together with the
gateway, on ``app.state``. Routes receive both through these dependencies
instead of reading the environment themselves.
"""

from __future__ import annotations

from fastapi import Request

from src.firefeed.config import Settings, get_settings
from src.firefeed.transcripts.exceptions import ConfigurationError
from src.firefeed.transcripts.gateway import FirefliesGateway


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with (process settings as fallback)."""
    return getattr(request.app.state, "settings", None) or get_settings()


def require_gateway(request: Request) -> FirefliesGateway:
    """Return the gateway or fail with the "not configured" error.

    The gateway is only built when an API key is configured, so a missing
    gateway is the single check for a missing key.

    Raises:
        ConfigurationError: No API key configured.
    """
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise ConfigurationError()
    return gateway

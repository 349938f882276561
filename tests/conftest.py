"""Test fixtures for the transcript feed API.

Provides:
- In-memory gateway test double
- FastAPI app created with isolated settings and the double on app.state
- Async HTTP clients for a configured and an unconfigured app
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.firefeed.main import create_app
from tests.helpers import InMemoryGateway, make_settings


@pytest.fixture
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture
def app(gateway):
    """FastAPI app with the in-memory gateway on app.state."""
    application = create_app(make_settings())
    application.state.gateway = gateway
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def unconfigured_client() -> AsyncGenerator[AsyncClient, None]:
    """Client for an app created without a Fireflies API key."""
    application = create_app(make_settings(FIREFLIES_API_KEY=""))
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

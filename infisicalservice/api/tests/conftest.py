"""
Shared fixtures for the HTTP API test suite.

The app is built with the in-memory Infisical fake from the root conftest and
served through ASGITransport, so no network or lifespan is involved.
"""

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from infisicalservice.api.app import create_app


@pytest.fixture
def app(service_config, action_registry):
    return create_app(service_config, registry=action_registry)


@pytest_asyncio.fixture
async def test_client(app):
    """Async HTTP client wrapping the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

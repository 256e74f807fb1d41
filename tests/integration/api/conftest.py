"""Integration test fixtures for API testing."""
from __future__ import annotations

import pytest
from httpx import AsyncClient, ASGITransport

from backend.src.adapters.inbound.fastapi_app import app
from backend.src.infrastructure.container import ApplicationContainer


@pytest.fixture
def test_container(test_settings, fake_sampler, recording_staging):
    """Container wired with the fake sampler and recording staging."""
    container = ApplicationContainer(test_settings)
    container.override("frame_sampler", fake_sampler)
    container.override("staging", recording_staging)
    return container


@pytest.fixture
async def async_client(test_container):
    """Create an async test client for the FastAPI app."""
    app.state.container = test_container

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

"""Integration test fixtures for EchoVoice.

Provides an async HTTP client against the real FastAPI app with the relay
dependency swapped for one using a temp upload dir and a mock provider.
"""

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.app import create_app
from src.api.routes.chat import get_relay
from src.services.relay import VoiceRelay


@pytest.fixture
def app():
    """Create a fresh FastAPI application instance."""
    return create_app()


@pytest.fixture
def llm_factory(mock_llm):
    """Factory handing the mock provider to the relay."""
    return MagicMock(return_value=mock_llm)


@pytest.fixture
def relay_settings(settings):
    """Settings used by the relay; tests may mutate before the request."""
    return settings


@pytest.fixture
async def async_client(app, relay_settings, llm_factory):
    """AsyncClient whose requests reach a relay backed by the mock provider."""
    app.dependency_overrides[get_relay] = lambda: VoiceRelay(
        settings=relay_settings, llm_factory=llm_factory
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()

"""
Shared test fixtures for the SafeCircle service.

This module provides reusable fixtures for:
- Building JSON stores and service state rooted in a temporary directory
- Creating a TestClient whose state, rate limiter and TTS client are overridden
"""

import pytest
from fastapi.testclient import TestClient

from libs.elevenlabs_client import ElevenLabsClient, get_elevenlabs_client
from libs.rate_limiter import rate_limit
from services.safecircle.main import app
from services.safecircle.state import SafeCircleState, get_state


@pytest.fixture
def data_dir(tmp_path):
    """Empty directory the stores write into."""
    return str(tmp_path / "data")


@pytest.fixture
def state(data_dir):
    """Fresh service state with no guardians, location or memory."""
    return SafeCircleState(data_dir)


@pytest.fixture
def disabled_tts():
    """ElevenLabs client with no credentials, so every request falls back."""
    return ElevenLabsClient(api_key="", voice_id="")


@pytest.fixture
def client(state, disabled_tts):
    """
    TestClient bound to the temporary state.

    Rate limiting is disabled here; the limiter has its own tests.
    """

    async def _no_rate_limit():
        return None

    app.dependency_overrides[get_state] = lambda: state
    app.dependency_overrides[rate_limit] = _no_rate_limit
    app.dependency_overrides[get_elevenlabs_client] = lambda: disabled_tts
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

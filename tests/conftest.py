"""Shared pytest fixtures for testing."""

import io
import wave

import numpy as np
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from voicebot.core.config import Config
from voicebot.models.robot import RobotSimulator
from voicebot.server.app import create_app
from voicebot.voice.speech import SimulatedTranscriber

ENV_VARS = (
    "VOICEBOT_HOST",
    "VOICEBOT_PORT",
    "VOICEBOT_LOG_LEVEL",
    "VOICEBOT_SAMPLE_INTERVAL_MS",
    "VOICEBOT_SPEECH_ENGINE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer .env overrides out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def robot() -> RobotSimulator:
    return RobotSimulator()


def make_wav(samples, sample_rate: int = 16000, channels: int = 1) -> bytes:
    """Encode float samples (-1..1) as 16-bit PCM WAV bytes."""
    pcm = (np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0) * 32767).astype('<i2')
    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm.tobytes())
    return buffer.getvalue()


def sine(amplitude: float, seconds: float = 0.5, sample_rate: int = 16000) -> np.ndarray:
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    return amplitude * np.sin(2 * np.pi * 440.0 * t)


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
def app():
    application = create_app(Config())
    # Deterministic "transcription" for the upload endpoint
    application.state.voicebot.transcriber = SimulatedTranscriber(["walk forward"])
    return application


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

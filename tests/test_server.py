"""
Integration Tests for the HTTP Demo Server
"""

import numpy as np
import pytest
from httpx import AsyncClient, ASGITransport

from conftest import make_wav, sine
from voicebot.core.config import Config, ServerConfig
from voicebot.server.app import create_app


# =============================================================================
# Upload Endpoint
# =============================================================================


class TestProcessAudio:
    """Tests for POST /process-audio."""

    @pytest.mark.asyncio
    async def test_loud_upload(self, client):
        files = {"audio": ("clip.wav", make_wav(sine(0.9)), "audio/wav")}
        response = await client.post("/process-audio", files=files)

        assert response.status_code == 200
        data = response.json()
        assert data["transcript"] == "walk forward"
        assert data["intent"] == "walk"
        assert data["emotion"] == "angry"
        assert data["robotState"]["position"]["x"] == pytest.approx(0.15)
        assert data["robotState"]["movement"]["linear"] == pytest.approx(1.5)
        assert data["frame"].startswith("<svg")

    @pytest.mark.asyncio
    async def test_quiet_upload(self, client):
        files = {"audio": ("clip.wav", make_wav(np.zeros(800)), "audio/wav")}
        data = (await client.post("/process-audio", files=files)).json()
        assert data["emotion"] == "sad"
        assert data["robotState"]["position"]["x"] == pytest.approx(0.05)

    @pytest.mark.asyncio
    async def test_missing_file(self, client):
        response = await client.post("/process-audio", data={"note": "no audio"})
        assert response.status_code == 400
        assert response.json() == {"error": "No audio file provided"}

    @pytest.mark.asyncio
    async def test_processing_error(self, app, client):
        class BrokenTranscriber:
            def transcribe(self, samples, sample_rate):
                raise RuntimeError("boom")

        app.state.voicebot.transcriber = BrokenTranscriber()
        files = {"audio": ("clip.wav", make_wav(sine(0.5)), "audio/wav")}
        response = await client.post("/process-audio", files=files)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process audio"}
        assert app.state.voicebot.robot.step_count == 0

    @pytest.mark.asyncio
    async def test_upload_too_large(self):
        app = create_app(Config(server=ServerConfig(max_upload_bytes=64)))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            files = {"audio": ("clip.raw", b"\x00" * 128, "application/octet-stream")}
            response = await ac.post("/process-audio", files=files)
        assert response.status_code == 413
        assert response.json() == {"error": "Audio file too large"}
        assert app.state.voicebot.robot.step_count == 0

    @pytest.mark.asyncio
    async def test_upload_at_limit_accepted(self):
        app = create_app(Config(server=ServerConfig(max_upload_bytes=64)))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            files = {"audio": ("clip.raw", b"\x00" * 64, "application/octet-stream")}
            response = await ac.post("/process-audio", files=files)
        assert response.status_code == 200
        assert response.json()["emotion"] == "sad"


# =============================================================================
# Browser Command Endpoint
# =============================================================================


class TestCommand:
    """Tests for POST /command."""

    @pytest.mark.asyncio
    async def test_shouted_transcript(self, client):
        response = await client.post("/command", json={"transcript": "GO FORWARD NOW!!"})
        data = response.json()
        assert response.status_code == 200
        assert data["intent"] == "walk"
        assert data["emotion"] == "angry"
        assert data["robotState"]["position"]["x"] == pytest.approx(0.15)

    @pytest.mark.asyncio
    async def test_energy_levels_override_text(self, client):
        body = {"transcript": "turn left", "averageLevel": 40, "peakLevel": 120}
        data = (await client.post("/command", json=body)).json()
        assert data["emotion"] == "happy"
        assert data["robotState"]["position"]["rotation"] == pytest.approx(0.144)

    @pytest.mark.asyncio
    async def test_neutral_energy_defers_to_text(self, client):
        body = {"transcript": "please walk", "averageLevel": 40, "peakLevel": 60}
        data = (await client.post("/command", json=body)).json()
        assert data["emotion"] == "sad"

    @pytest.mark.asyncio
    async def test_negative_levels_rejected(self, client):
        body = {"transcript": "walk", "averageLevel": -1, "peakLevel": 10}
        response = await client.post("/command", json=body)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_steps_accumulate(self, client):
        for _ in range(3):
            await client.post("/command", json={"transcript": "walk"})
        data = (await client.get("/state")).json()
        assert data["robotState"]["position"]["x"] == pytest.approx(0.3)
        assert data["robotState"]["steps"] == 3


# =============================================================================
# State, Reset and Client
# =============================================================================


class TestState:
    """Tests for GET /state, POST /reset and GET /."""

    @pytest.mark.asyncio
    async def test_initial_state(self, client):
        data = (await client.get("/state")).json()
        assert data["robotState"]["position"] == {"x": 0.0, "y": 0.0, "rotation": 0.0}
        assert data["robotState"]["emotion"] == "neutral"
        assert "Position: (0.0, 0.0)" in data["frame"]

    @pytest.mark.asyncio
    async def test_state_keeps_last_emotion(self, client):
        await client.post("/command", json={"transcript": "I am so happy, walk"})
        data = (await client.get("/state")).json()
        assert data["robotState"]["emotion"] == "happy"
        assert "Emotion: happy" in data["frame"]

    @pytest.mark.asyncio
    async def test_reset(self, client):
        await client.post("/command", json={"transcript": "walk"})
        data = (await client.post("/reset")).json()
        assert data["robotState"]["position"]["x"] == 0.0
        assert data["robotState"]["steps"] == 0

    @pytest.mark.asyncio
    async def test_index_page(self, client):
        response = await client.get("/")
        assert response.status_code == 200
        assert "Voice-to-Robot Control" in response.text

    @pytest.mark.asyncio
    async def test_client_ignores_press_while_starting(self, client):
        page = (await client.get("/")).text
        assert "if (recognition || starting) return;" in page
        # Flag is raised before the microphone prompt is awaited
        assert page.index("starting = true;") < page.index("await startMonitoring();")

    @pytest.mark.asyncio
    async def test_apps_do_not_share_robots(self, client):
        await client.post("/command", json={"transcript": "walk"})
        other = create_app(Config())
        assert other.state.voicebot.robot.step_count == 0

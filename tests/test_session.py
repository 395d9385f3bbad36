"""
Unit Tests for RobotSession

Tests for the sampling timer, one-shot recognition and cancellation.
"""

import asyncio

import pytest

from voicebot.core import event_bus as events
from voicebot.core.config import AudioConfig
from voicebot.core.errors import CaptureError, RecognitionError
from voicebot.core.event_bus import EventBus
from voicebot.core.session import RobotSession
from voicebot.core.types import Emotion, Intent, RobotPose
from voicebot.models.robot import RobotSimulator
from voicebot.voice.capture import SpectrumSource, StaticSpectrum

FAST = AudioConfig(sample_interval_ms=5)
LOUD_FRAME = [200] * 128
QUIET_FRAME = [2] * 128


class GatedRecognizer:
    """Returns a fixed transcript once the gate opens."""

    def __init__(self, text: str = "walk forward"):
        self.text = text
        self.gate = asyncio.Event()
        self.calls = 0

    async def listen(self) -> str:
        self.calls += 1
        await self.gate.wait()
        return self.text


class FailingRecognizer:
    async def listen(self) -> str:
        raise RecognitionError("No speech understood")


class BrokenMicrophone(SpectrumSource):
    def read_spectrum(self):
        raise CaptureError("Microphone unavailable: device busy")


def make_session(frames, recognizer, bus=None) -> RobotSession:
    return RobotSession(
        robot=RobotSimulator(),
        spectrum_source=StaticSpectrum(frames),
        recognizer=recognizer,
        event_bus=bus or EventBus(),
        config=FAST,
    )


async def wait_for_event(bus: EventBus, name: str, timeout: float = 2.0):
    received = asyncio.get_running_loop().create_future()

    def _listener(*args):
        if not received.done():
            received.set_result(args)

    bus.subscribe(name, _listener)
    try:
        return await asyncio.wait_for(received, timeout)
    finally:
        bus.unsubscribe(name, _listener)


@pytest.mark.asyncio
async def test_live_audio_emotion_is_fused_into_command():
    recognizer = GatedRecognizer("walk forward")
    session = make_session([LOUD_FRAME], recognizer)
    session.event_bus.subscribe(events.EMOTION_SAMPLED, lambda *_: recognizer.gate.set())

    committed = asyncio.ensure_future(wait_for_event(session.event_bus, events.COMMAND_COMMITTED))
    await asyncio.sleep(0)
    await session.event_bus.initialize()
    assert await session.start_listening()
    (result,) = await committed

    assert result.intent == Intent.WALK
    assert result.audio_emotion == Emotion.ANGRY
    assert result.emotion == Emotion.ANGRY
    assert session.robot.pose.x == pytest.approx(0.15)
    await session.shutdown()


@pytest.mark.asyncio
async def test_text_emotion_used_when_audio_is_neutral():
    recognizer = GatedRecognizer("GO FORWARD NOW!!")
    # avg 40, peak 40: neutral on the audio path
    session = make_session([[40] * 128], recognizer)
    session.event_bus.subscribe(events.EMOTION_SAMPLED, lambda *_: recognizer.gate.set())
    await session.event_bus.initialize()

    stopped = asyncio.ensure_future(wait_for_event(session.event_bus, events.LISTENING_STOPPED))
    await asyncio.sleep(0)
    await session.start_listening()
    await stopped

    assert session.last_result.audio_emotion == Emotion.NEUTRAL
    assert session.last_result.emotion == Emotion.ANGRY
    assert not session.is_listening


@pytest.mark.asyncio
async def test_sampling_updates_live_emotion():
    session = make_session([QUIET_FRAME], GatedRecognizer())
    assert await session.sample_once() == Emotion.SAD
    assert session.last_features.peak_level == pytest.approx(2.0)


@pytest.mark.asyncio
async def test_second_start_is_ignored():
    recognizer = GatedRecognizer()
    session = make_session([QUIET_FRAME], recognizer)

    assert await session.start_listening() is True
    assert await session.start_listening() is False
    await asyncio.sleep(0.02)
    assert recognizer.calls == 1

    await session.stop_listening()


@pytest.mark.asyncio
async def test_no_ticks_after_stop():
    session = make_session([QUIET_FRAME], GatedRecognizer())
    ticks = []
    session.event_bus.subscribe(events.EMOTION_SAMPLED, lambda emotion, _: ticks.append(emotion))

    await session.start_listening()
    await asyncio.sleep(0.05)
    await session.stop_listening()
    assert ticks
    count = len(ticks)

    await asyncio.sleep(0.05)
    assert len(ticks) == count
    assert not session.is_listening
    assert session.robot.step_count == 0


@pytest.mark.asyncio
async def test_stop_when_idle_is_noop():
    session = make_session([QUIET_FRAME], GatedRecognizer())
    await session.stop_listening()
    assert not session.is_listening


@pytest.mark.asyncio
async def test_recognition_failure_commits_nothing():
    session = make_session([LOUD_FRAME], FailingRecognizer())
    await session.event_bus.initialize()
    errors = asyncio.ensure_future(wait_for_event(session.event_bus, events.RECOGNITION_ERROR))
    stopped = asyncio.ensure_future(wait_for_event(session.event_bus, events.LISTENING_STOPPED))
    await asyncio.sleep(0)

    await session.start_listening()
    (message,) = await errors
    await stopped

    assert message == "No speech understood"
    assert session.last_error == message
    assert session.last_result is None
    assert session.robot.pose == RobotPose()
    assert not session.is_listening


@pytest.mark.asyncio
async def test_capture_failure_is_reported():
    recognizer = GatedRecognizer()
    session = RobotSession(
        robot=RobotSimulator(),
        spectrum_source=BrokenMicrophone(),
        recognizer=recognizer,
        config=FAST,
    )
    await session.event_bus.initialize()
    errors = asyncio.ensure_future(wait_for_event(session.event_bus, events.CAPTURE_ERROR))
    await asyncio.sleep(0)

    await session.start_listening()
    (message,) = await errors

    assert "Microphone unavailable" in message
    assert session.live_emotion == Emotion.NEUTRAL
    await session.stop_listening()
    assert session.robot.step_count == 0


@pytest.mark.asyncio
async def test_handle_utterance_directly():
    session = make_session([QUIET_FRAME], GatedRecognizer())
    session.live_emotion = Emotion.HAPPY
    result = await session.handle_utterance("turn left")
    assert result.emotion == Emotion.HAPPY
    assert session.robot.pose.heading == pytest.approx(0.144)


class CrashingRecognizer:
    def __init__(self):
        self.calls = 0

    async def listen(self) -> str:
        self.calls += 1
        raise RuntimeError("driver crashed")


@pytest.mark.asyncio
async def test_unexpected_recognizer_error_ends_session():
    recognizer = CrashingRecognizer()
    session = make_session([QUIET_FRAME], recognizer)
    await session.event_bus.initialize()
    errors = asyncio.ensure_future(wait_for_event(session.event_bus, events.RECOGNITION_ERROR))
    stopped = asyncio.ensure_future(wait_for_event(session.event_bus, events.LISTENING_STOPPED))
    await asyncio.sleep(0)

    await session.start_listening()
    (message,) = await errors
    await stopped

    assert "driver crashed" in message
    assert not session.is_listening
    assert session.robot.step_count == 0

    # A later start is honoured again
    stopped = asyncio.ensure_future(wait_for_event(session.event_bus, events.LISTENING_STOPPED))
    await asyncio.sleep(0)
    assert await session.start_listening() is True
    await stopped
    assert recognizer.calls == 2

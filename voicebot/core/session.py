"""
Robot session - coordinates one listening session.

Two independent producers feed a single consumer on the event loop:
a periodic sampling task that keeps the live (audio) emotion current,
and a one-shot recognition task that delivers the utterance. Only the
recognition result commits a command to the robot.
"""

import asyncio
import logging
from typing import Optional

from . import event_bus as events
from .config import AudioConfig
from .errors import CaptureError, RecognitionError
from .event_bus import EventBus
from .pipeline import process_utterance
from .types import AudioFeatures, CommandResult, Emotion
from ..models.robot import RobotSimulator
from ..voice.capture import SpectrumSource
from ..voice.emotion import classify_audio
from ..voice.features import extract_features

logger = logging.getLogger(__name__)


class RobotSession:
    """Owns the live emotion estimate and drives the robot from recognized speech."""

    def __init__(self,
                 robot: RobotSimulator,
                 spectrum_source: SpectrumSource,
                 recognizer,
                 event_bus: Optional[EventBus] = None,
                 config: Optional[AudioConfig] = None):
        self.robot = robot
        self.spectrum_source = spectrum_source
        self.recognizer = recognizer
        self.event_bus = event_bus or EventBus()
        self.config = config or AudioConfig()

        self.live_emotion = Emotion.NEUTRAL
        self.last_features = AudioFeatures()
        self.last_result: Optional[CommandResult] = None
        self.last_error: Optional[str] = None
        self.is_listening = False

        self._sampler_task: Optional[asyncio.Task] = None
        self._recognition_task: Optional[asyncio.Task] = None

    @property
    def sample_interval(self) -> float:
        return self.config.sample_interval_ms / 1000.0

    async def start_listening(self) -> bool:
        """
        Start sampling and recognition.

        Returns:
            False if a session was already active (the request is ignored)
        """
        if self.is_listening:
            logger.warning("Already listening; start request ignored")
            return False

        if not self.event_bus.running:
            await self.event_bus.initialize()

        self.is_listening = True
        self.last_error = None
        self._sampler_task = asyncio.create_task(self._sample_loop())
        self._recognition_task = asyncio.create_task(self._recognize_once())
        logger.info("Started listening session")
        await self.event_bus.emit(events.LISTENING_STARTED)
        return True

    async def stop_listening(self):
        """Cancel sampling and any in-flight recognition; no tick fires afterwards."""
        if not self.is_listening:
            return

        current = asyncio.current_task()
        tasks = [t for t in (self._sampler_task, self._recognition_task)
                 if t is not None and t is not current]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        self._sampler_task = None
        self._recognition_task = None
        self.is_listening = False
        logger.info("Stopped listening session")
        await self.event_bus.emit(events.LISTENING_STOPPED)

    async def sample_once(self) -> Emotion:
        """Read one spectrum frame and update the live emotion."""
        loop = asyncio.get_running_loop()
        frame = await loop.run_in_executor(None, self.spectrum_source.read_spectrum)
        self.last_features = extract_features(frame)
        self.live_emotion = classify_audio(self.last_features, self.config.thresholds)
        await self.event_bus.emit(events.EMOTION_SAMPLED, self.live_emotion, self.last_features)
        return self.live_emotion

    async def _sample_loop(self):
        try:
            while True:
                await self.sample_once()
                await asyncio.sleep(self.sample_interval)
        except CaptureError as e:
            # Capture failure ends monitoring; the live emotion keeps its last value
            self.last_error = e.message
            logger.error(f"Audio capture failed: {e.message}")
            await self.event_bus.emit(events.CAPTURE_ERROR, e.message)

    async def _recognize_once(self):
        cancelled = False
        try:
            text = await self.recognizer.listen()
            await self.handle_utterance(text)
        except asyncio.CancelledError:
            cancelled = True
            raise
        except (RecognitionError, CaptureError) as e:
            await self.handle_recognition_error(e.message)
        except Exception as e:
            logger.error(f"Utterance handling failed unexpectedly: {e}", exc_info=True)
            await self.handle_recognition_error(f"Recognition failed: {e}")
        finally:
            # One utterance per session; a cancelled task is already being stopped
            if not cancelled:
                await self.stop_listening()

    async def handle_utterance(self, text: str) -> CommandResult:
        """Commit one recognized utterance using the current live emotion."""
        await self.event_bus.emit(events.SPEECH_RECOGNIZED, text)
        result = process_utterance(self.robot, text, self.live_emotion)
        self.last_result = result
        await self.event_bus.emit(events.COMMAND_COMMITTED, result)
        return result

    async def handle_recognition_error(self, message: str):
        """Report a failed recognition; nothing is committed."""
        self.last_error = message
        logger.warning(f"Recognition failed: {message}")
        await self.event_bus.emit(events.RECOGNITION_ERROR, message)

    async def shutdown(self):
        await self.stop_listening()
        self.spectrum_source.close()
        await self.event_bus.shutdown()

"""
Speech recognition for voice commands.

SpeechManager wraps the SpeechRecognition library for live microphone or
in-memory audio. SimulatedTranscriber stands in for real recognition in the
offline upload demo: it only picks a phrase at random.
"""

import asyncio
import logging
import random
from typing import List, Optional

import numpy as np
import speech_recognition as sr

from ..core.config import SpeechConfig
from ..core.errors import CaptureError, RecognitionError

logger = logging.getLogger(__name__)


class SimulatedTranscriber:
    """Returns a random phrase from a fixed list; the audio is ignored."""

    def __init__(self, phrases: Optional[List[str]] = None,
                 rng: Optional[random.Random] = None,
                 delay: float = 0.0):
        self.phrases = list(SpeechConfig().phrases if phrases is None else phrases)
        if not self.phrases:
            raise ValueError("SimulatedTranscriber needs at least one phrase")
        self.rng = rng or random.Random()
        # Pretend speaking time before listen() returns
        self.delay = delay

    def transcribe(self, samples=None, sample_rate: int = 16000) -> str:
        phrase = self.rng.choice(self.phrases)
        logger.debug(f"Simulated transcript: {phrase}")
        return phrase

    async def listen(self) -> str:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        return self.transcribe()


class SpeechManager:
    """
    Speech recognition backed by the SpeechRecognition library.

    Blocking recognizer calls run in the default executor so the event loop
    keeps sampling audio while an utterance is being recognized.
    """

    def __init__(self, config: Optional[SpeechConfig] = None,
                 device_index: Optional[int] = None,
                 recognizer: Optional[sr.Recognizer] = None):
        self.config = config or SpeechConfig()
        self.device_index = device_index
        self.recognizer = recognizer or sr.Recognizer()
        logger.info(f"Speech Manager created (language={self.config.language})")

    def _recognize(self, audio: sr.AudioData) -> str:
        try:
            text = self.recognizer.recognize_google(audio, language=self.config.language)
        except sr.UnknownValueError as e:
            raise RecognitionError("No speech understood") from e
        except sr.RequestError as e:
            raise RecognitionError(f"Recognition service error: {e}") from e
        logger.info(f"Speech recognized: {text}")
        return text

    def transcribe(self, samples, sample_rate: int = 16000) -> str:
        """
        Recognize speech in a float waveform.

        Args:
            samples: Mono samples in -1..1
            sample_rate: Sample rate of the waveform

        Returns:
            Recognized text

        Raises:
            RecognitionError: Nothing intelligible or the service failed
        """
        pcm = np.clip(np.asarray(samples, dtype=np.float64).ravel(), -1.0, 1.0)
        if pcm.size == 0:
            raise RecognitionError("No audio to recognize")
        frame_data = (pcm * 32767).astype('<i2').tobytes()
        return self._recognize(sr.AudioData(frame_data, sample_rate, 2))

    def _listen_blocking(self) -> str:
        try:
            with sr.Microphone(device_index=self.device_index) as source:
                self.recognizer.adjust_for_ambient_noise(source, duration=0.3)
                audio = self.recognizer.listen(
                    source,
                    timeout=self.config.timeout,
                    phrase_time_limit=self.config.phrase_time_limit,
                )
        except sr.WaitTimeoutError as e:
            raise RecognitionError("No speech detected before timeout") from e
        except (OSError, AttributeError) as e:
            # AttributeError is what sr.Microphone raises when PyAudio is missing
            raise CaptureError(f"Microphone unavailable: {e}") from e
        return self._recognize(audio)

    async def listen(self) -> str:
        """Capture one utterance from the microphone and recognize it."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._listen_blocking)


def create_transcriber(config: SpeechConfig, device_index: Optional[int] = None):
    """Build the recognizer selected by config.engine."""
    if config.engine == "simulated":
        return SimulatedTranscriber(config.phrases)
    if config.engine == "google":
        return SpeechManager(config, device_index=device_index)
    raise ValueError(f"Unknown speech engine: {config.engine}")

"""
Audio capture sources feeding the live emotion estimate.

A spectrum source yields frames of frequency-bin magnitudes on the same
0-255 scale a browser AnalyserNode produces, so the same thresholds work
for the browser client and for local microphone capture.
"""

import logging
from itertools import cycle
from typing import Iterable, Optional

import numpy as np

from ..core.config import AudioConfig
from ..core.errors import CaptureError

try:
    import pyaudio
    PYAUDIO_AVAILABLE = True
except ImportError:
    pyaudio = None
    PYAUDIO_AVAILABLE = False

logger = logging.getLogger(__name__)


def spectrum_from_pcm(pcm: np.ndarray,
                      min_decibels: float = -100.0,
                      max_decibels: float = -30.0) -> np.ndarray:
    """
    Convert one block of PCM samples (-1..1) to byte-scaled bin magnitudes.

    Bins are Blackman-windowed FFT magnitudes in dB, mapped linearly so that
    min_decibels -> 0 and max_decibels -> 255.
    """
    pcm = np.asarray(pcm, dtype=np.float64).ravel()
    n = pcm.size
    if n < 2:
        return np.zeros(0, dtype=np.uint8)

    magnitudes = np.abs(np.fft.rfft(pcm * np.blackman(n)))[: n // 2] / n
    decibels = 20.0 * np.log10(np.maximum(magnitudes, 1e-12))
    scaled = 255.0 * (decibels - min_decibels) / (max_decibels - min_decibels)
    return np.clip(scaled, 0, 255).astype(np.uint8)


class SpectrumSource:
    """Interface for anything that can produce spectrum frames."""

    def read_spectrum(self) -> np.ndarray:
        raise NotImplementedError

    def close(self):
        pass


class StaticSpectrum(SpectrumSource):
    """Replays a fixed list of frames, looping by default."""

    def __init__(self, frames: Iterable, loop: bool = True):
        self._frames = [np.asarray(f, dtype=np.float64) for f in frames]
        self._iter = cycle(self._frames) if loop else iter(self._frames)
        self.reads = 0

    def read_spectrum(self) -> np.ndarray:
        self.reads += 1
        # An exhausted replay looks like silence to the extractor
        return next(self._iter, np.zeros(0))


class MicrophoneSpectrum(SpectrumSource):
    """Live microphone spectrum via PyAudio."""

    def __init__(self, config: Optional[AudioConfig] = None):
        if not PYAUDIO_AVAILABLE:
            raise CaptureError("pyaudio package not installed; microphone capture unavailable")

        self.config = config or AudioConfig()
        self.audio = None
        self.stream = None
        self._open()

    def _open(self):
        try:
            self.audio = pyaudio.PyAudio()
            self.stream = self.audio.open(
                format=pyaudio.paInt16,
                channels=1,
                rate=self.config.sample_rate,
                input=True,
                input_device_index=self.config.device_index,
                frames_per_buffer=self.config.fft_size,
            )
            logger.info(f"Microphone opened at {self.config.sample_rate} Hz")
        except OSError as e:
            self.close()
            raise CaptureError(f"Microphone unavailable: {e}") from e

    def read_spectrum(self) -> np.ndarray:
        if self.stream is None:
            raise CaptureError("Microphone stream is closed")
        fft_size = self.config.fft_size
        try:
            # Drain what accumulated since the last tick; only the newest window is analysed
            frames = max(fft_size, self.stream.get_read_available())
            raw = self.stream.read(frames, exception_on_overflow=False)
        except OSError as e:
            raise CaptureError(f"Microphone read failed: {e}") from e

        pcm = np.frombuffer(raw, dtype='<i2')[-fft_size:].astype(np.float64) / 32768.0
        return spectrum_from_pcm(pcm, self.config.min_decibels, self.config.max_decibels)

    def close(self):
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.warning(f"Error closing microphone stream: {e}")
            self.stream = None
        if self.audio is not None:
            self.audio.terminate()
            self.audio = None

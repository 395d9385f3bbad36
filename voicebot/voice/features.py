"""
Audio feature extraction.

Reduces a frame of frequency-bin magnitudes (0-255, as produced by a
browser analyser node or MicrophoneSpectrum) to an average/peak pair, and
summarizes raw uploaded waveforms. Every function here fails soft: bad
input produces zero-valued results instead of an exception.
"""

import io
import logging
import wave
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from ..core.types import AudioFeatures, WaveformSummary

logger = logging.getLogger(__name__)

MAX_MAGNITUDE = 255.0
DEFAULT_SAMPLE_RATE = 16000

ArrayLike = Union[Sequence[float], np.ndarray]


def _as_float_array(samples: Optional[ArrayLike]) -> np.ndarray:
    """Coerce input to a flat float64 array with non-finite values zeroed."""
    if samples is None:
        return np.zeros(0)
    try:
        array = np.asarray(samples, dtype=np.float64).ravel()
    except (TypeError, ValueError):
        logger.debug("Discarding non-numeric sample buffer")
        return np.zeros(0)
    return np.nan_to_num(array, nan=0.0, posinf=0.0, neginf=0.0)


def extract_features(samples: Optional[ArrayLike]) -> AudioFeatures:
    """
    Reduce one spectrum frame to AudioFeatures.

    Args:
        samples: Frequency-bin magnitudes, each expected in [0, 255]

    Returns:
        Mean and max of the clipped magnitudes, or zeros for an empty frame
    """
    array = _as_float_array(samples)
    if array.size == 0:
        return AudioFeatures()

    array = np.clip(array, 0.0, MAX_MAGNITUDE)
    return AudioFeatures(
        average_level=float(array.mean()),
        peak_level=float(array.max()),
    )


def summarize_waveform(samples: Optional[ArrayLike],
                       sample_rate: int = DEFAULT_SAMPLE_RATE) -> WaveformSummary:
    """RMS, peak absolute amplitude and duration of a float waveform."""
    array = _as_float_array(samples)
    if array.size == 0:
        return WaveformSummary()

    rms = float(np.sqrt(np.mean(np.square(array))))
    max_amplitude = float(np.max(np.abs(array)))
    duration = array.size / sample_rate if sample_rate > 0 else 0.0
    return WaveformSummary(rms=rms, max_amplitude=max_amplitude, duration=duration)


def _decode_wav(data: bytes) -> Tuple[np.ndarray, int]:
    with wave.open(io.BytesIO(data), 'rb') as wav:
        channels = wav.getnchannels()
        width = wav.getsampwidth()
        rate = wav.getframerate()
        frames = wav.readframes(wav.getnframes())

    if width == 1:
        # 8-bit PCM is unsigned
        pcm = (np.frombuffer(frames, dtype=np.uint8).astype(np.float64) - 128.0) / 128.0
    elif width == 2:
        pcm = np.frombuffer(frames, dtype='<i2').astype(np.float64) / 32768.0
    elif width == 4:
        pcm = np.frombuffer(frames, dtype='<i4').astype(np.float64) / 2147483648.0
    else:
        raise wave.Error(f"Unsupported sample width: {width}")

    if channels > 1:
        usable = pcm.size - pcm.size % channels
        pcm = pcm[:usable].reshape(-1, channels).mean(axis=1)
    return pcm, rate


def decode_audio(data: Optional[bytes]) -> Tuple[np.ndarray, int]:
    """
    Decode an uploaded audio payload into mono float samples.

    RIFF/WAVE PCM files are decoded properly; anything else is read as raw
    little-endian float32. Undecodable payloads produce an empty array.

    Returns:
        (samples, sample_rate)
    """
    if not data:
        return np.zeros(0), DEFAULT_SAMPLE_RATE

    if data[:4] == b'RIFF' and data[8:12] == b'WAVE':
        try:
            return _decode_wav(data)
        except (wave.Error, EOFError, ValueError) as e:
            logger.warning(f"Could not decode WAV upload: {e}")
            return np.zeros(0), DEFAULT_SAMPLE_RATE

    usable = len(data) - len(data) % 4
    raw = np.frombuffer(data[:usable], dtype='<f4').astype(np.float64)
    raw = np.nan_to_num(raw, nan=0.0, posinf=0.0, neginf=0.0)
    # Compressed containers read this way are noise; keep them in full-scale range
    return np.clip(raw, -1.0, 1.0), DEFAULT_SAMPLE_RATE

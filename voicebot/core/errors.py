"""
Exception types raised at the edges of the voice-to-robot demo.
The classification pipeline itself never raises; these cover capture,
recognition and configuration failures.
"""


class VoiceBotError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CaptureError(VoiceBotError):
    """Microphone or audio stream is unavailable."""


class RecognitionError(VoiceBotError):
    """Speech could not be understood or the recognizer failed."""


class ConfigError(VoiceBotError):
    """Configuration file or override is invalid."""

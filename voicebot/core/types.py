"""
Shared value types for the voice-to-robot pipeline.
Enumerations for the discrete categories and small records passed between stages.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any


class Emotion(str, Enum):
    """Affect category that scales robot motion."""
    NEUTRAL = "neutral"
    HAPPY = "happy"
    ANGRY = "angry"
    SAD = "sad"


class Intent(str, Enum):
    """Command category extracted from an utterance."""
    IDLE = "idle"
    STOP = "stop"
    WALK = "walk"
    BACK = "back"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"


@dataclass(frozen=True)
class AudioFeatures:
    """Energy summary of one spectrum frame."""
    average_level: float = 0.0
    peak_level: float = 0.0


@dataclass(frozen=True)
class WaveformSummary:
    """Loudness summary of a raw waveform (upload path)."""
    rms: float = 0.0
    max_amplitude: float = 0.0
    duration: float = 0.0


@dataclass(frozen=True)
class RobotPose:
    """Position in arena units and heading in radians."""
    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        # "rotation" is the field name the browser client reads
        return {"x": self.x, "y": self.y, "rotation": self.heading}


@dataclass(frozen=True)
class MotionCommand:
    """Gain-scaled velocities applied for a single step."""
    linear: float = 0.0
    angular: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class CommandResult:
    """Everything one committed utterance produced."""
    transcript: str
    intent: Intent
    emotion: Emotion
    audio_emotion: Emotion
    text_emotion: Emotion
    command: MotionCommand
    pose: RobotPose

    def robot_state(self) -> Dict[str, Any]:
        """Robot state in the shape returned by the HTTP API."""
        return {
            "position": self.pose.to_dict(),
            "movement": self.command.to_dict(),
            "emotion": self.emotion.value,
            "intent": self.intent.value,
        }

"""
Robot Model - Simulated 2D robot driven by committed voice commands.
Holds the pose and applies one bounded kinematic step per command.
"""

import logging
import math
from typing import Dict, Optional, Tuple

from ..core.config import MotionConfig
from ..core.types import Emotion, Intent, MotionCommand, RobotPose

logger = logging.getLogger(__name__)

# Multiplier applied to both velocity components
EMOTION_GAIN: Dict[Emotion, float] = {
    Emotion.NEUTRAL: 1.0,
    Emotion.HAPPY: 1.2,
    Emotion.ANGRY: 1.5,
    Emotion.SAD: 0.5,
}

# Base (linear, angular) velocity per intent
INTENT_MOTION: Dict[Intent, Tuple[float, float]] = {
    Intent.IDLE: (0.0, 0.0),
    Intent.STOP: (0.0, 0.0),
    Intent.WALK: (1.0, 0.0),
    Intent.BACK: (-0.8, 0.0),
    Intent.TURN_LEFT: (0.0, 1.2),
    Intent.TURN_RIGHT: (0.0, -1.2),
}


def motion_command(intent: Intent, emotion: Emotion) -> MotionCommand:
    """Gain-scaled velocities for an (intent, emotion) pair."""
    gain = EMOTION_GAIN[emotion]
    linear, angular = INTENT_MOTION[intent]
    return MotionCommand(linear=linear * gain, angular=angular * gain)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class RobotSimulator:
    """
    Simulation context owning a single robot pose.

    Each instance is independent, so sessions and tests never share state.
    """

    def __init__(self, config: Optional[MotionConfig] = None,
                 initial_pose: Optional[RobotPose] = None):
        self.config = config or MotionConfig()
        self._initial_pose = initial_pose or RobotPose()
        self.pose = self._bounded(self._initial_pose)
        self.step_count = 0
        logger.info(
            f"Robot simulator created (arena x=[{self.config.min_x}, {self.config.max_x}], "
            f"y=[{self.config.min_y}, {self.config.max_y}])"
        )

    def _bounded(self, pose: RobotPose) -> RobotPose:
        cfg = self.config
        return RobotPose(
            x=_clamp(pose.x, cfg.min_x, cfg.max_x),
            y=_clamp(pose.y, cfg.min_y, cfg.max_y),
            heading=pose.heading,
        )

    def step(self, intent: Intent, emotion: Emotion) -> MotionCommand:
        """
        Apply one committed command to the pose.

        Position moves along the current heading and is clamped into the
        arena; the heading then accumulates the angular component unclamped.

        Args:
            intent: Recognized command
            emotion: Committed emotion scaling the motion

        Returns:
            The velocities that were applied
        """
        command = motion_command(intent, emotion)
        scale = self.config.step_scale
        pose = self.pose

        moved = RobotPose(
            x=pose.x + command.linear * math.cos(pose.heading) * scale,
            y=pose.y + command.linear * math.sin(pose.heading) * scale,
            heading=pose.heading + command.angular * scale,
        )
        # Single assignment; readers never observe a half-updated pose
        self.pose = self._bounded(moved)
        self.step_count += 1

        logger.debug(
            f"Step {self.step_count}: {intent.value}/{emotion.value} -> "
            f"({self.pose.x:.2f}, {self.pose.y:.2f}, {self.pose.heading:.2f})"
        )
        return command

    def snapshot(self) -> RobotPose:
        """Current pose (immutable)."""
        return self.pose

    def reset(self):
        """Return to the initial pose."""
        self.pose = self._bounded(self._initial_pose)
        self.step_count = 0
        logger.info("Robot pose reset")

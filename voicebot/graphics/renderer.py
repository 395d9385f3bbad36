"""
Robot Renderer - Projects the simulated robot into an SVG frame.
Rendering is a pure function of (pose, emotion); no state is kept between frames.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

from ..core.config import RenderConfig
from ..core.types import Emotion, RobotPose

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmotionColors:
    """Body fill and accent (outline, direction marker) colors."""
    body: str
    accent: str


EMOTION_COLORS: Dict[Emotion, EmotionColors] = {
    Emotion.NEUTRAL: EmotionColors(body="#4a90e2", accent="#2c5aa0"),
    Emotion.HAPPY: EmotionColors(body="#f5c542", accent="#c99a06"),
    Emotion.ANGRY: EmotionColors(body="#e24a4a", accent="#a02c2c"),
    Emotion.SAD: EmotionColors(body="#7f8c9d", accent="#4b5563"),
}

TEXT_STYLE = 'font-family="Arial" font-size="12" fill="#333"'


def _num(value: float) -> str:
    # Compact but stable number formatting for SVG attributes
    return f"{value:.2f}".rstrip('0').rstrip('.') if value != 0 else "0"


class SvgRenderer:
    """Renders a top-down view of the robot as an SVG document."""

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()

    def screen_position(self, pose: RobotPose):
        """Arena coordinates -> canvas pixels."""
        cfg = self.config
        return (
            cfg.origin_x + pose.x * cfg.pixels_per_unit,
            cfg.origin_y + pose.y * cfg.pixels_per_unit,
        )

    def render(self, pose: RobotPose, emotion: Emotion = Emotion.NEUTRAL) -> str:
        """Build the SVG frame for a pose and emotion."""
        cfg = self.config
        colors = EMOTION_COLORS[emotion]
        robot_x, robot_y = self.screen_position(pose)
        rotation = math.degrees(pose.heading)

        lines = [
            f'<svg width="{cfg.width}" height="{cfg.height}" xmlns="http://www.w3.org/2000/svg">',
            f'  <rect width="{cfg.width}" height="{cfg.height}" fill="white"/>',
            f'  <g transform="translate({_num(robot_x)}, {_num(robot_y)}) rotate({_num(rotation)})">',
            f'    <circle cx="0" cy="0" r="20" fill="{colors.body}" stroke="{colors.accent}" stroke-width="2"/>',
            f'    <polygon points="15,0 25,5 25,-5" fill="{colors.accent}"/>',
            '    <circle cx="-8" cy="-8" r="3" fill="white"/>',
            '    <circle cx="8" cy="-8" r="3" fill="white"/>',
            '    <circle cx="-8" cy="-8" r="1" fill="black"/>',
            '    <circle cx="8" cy="-8" r="1" fill="black"/>',
            '  </g>',
            f'  <text x="10" y="20" {TEXT_STYLE}>Position: ({pose.x:.1f}, {pose.y:.1f})</text>',
            f'  <text x="10" y="35" {TEXT_STYLE}>Rotation: {rotation:.1f}°</text>',
            f'  <text x="10" y="50" {TEXT_STYLE}>Emotion: {emotion.value}</text>',
            '</svg>',
        ]
        return "\n".join(lines)

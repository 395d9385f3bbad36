"""
Intent recognition for spoken robot commands.
"""

import re
from typing import Optional, List, Tuple, Pattern

from ..core.types import Intent

# Priority order is the tie-break: "go back" is BACK because BACK is tested before WALK.
INTENT_RULES: List[Tuple[Intent, Pattern]] = [
    (Intent.STOP, re.compile(r'\b(stop|halt|freeze|wait|pause)\b')),
    (Intent.TURN_LEFT, re.compile(r'\b(left|turn left)\b')),
    (Intent.TURN_RIGHT, re.compile(r'\b(right|turn right)\b')),
    (Intent.BACK, re.compile(r'\b(back|reverse|backward|go back)\b')),
    (Intent.WALK, re.compile(r'\b(forward|walk|go|ahead|move|start)\b')),
]


def classify_intent(text: Optional[str]) -> Intent:
    """Map recognized text to the first matching command, or IDLE."""
    if not text:
        return Intent.IDLE

    lowered = text.lower()
    for intent, pattern in INTENT_RULES:
        if pattern.search(lowered):
            return intent
    return Intent.IDLE

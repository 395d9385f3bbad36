"""
Emotion classification heuristics.

Three total classifiers, none of which raise:
- classify_audio: live analyser energy (0-255 scale)
- classify_text: keyword and punctuation cues in the recognized utterance
- classify_waveform: loudness of an uploaded waveform (-1..1 scale)

fuse_emotion combines the audio and text estimates for one utterance.
"""

import logging
import re
from typing import Optional, List, Tuple, Pattern

from ..core.config import EmotionThresholds
from ..core.types import AudioFeatures, Emotion, WaveformSummary

logger = logging.getLogger(__name__)


def _keywords(*words: str) -> Pattern:
    return re.compile(r'\b(' + '|'.join(re.escape(w) for w in words) + r')\b')


# Checked in this order; the first category with a hit wins.
# Patterns run against the lower-cased text unless noted.
TEXT_EMOTION_RULES: List[Tuple[Emotion, List[Pattern], List[Pattern]]] = [
    (
        Emotion.HAPPY,
        [
            _keywords('happy', 'great', 'awesome', 'yay', 'love', 'wonderful',
                      'excellent', 'fantastic', 'amazing', 'good', 'nice',
                      'glad', 'excited'),
            re.compile(r':\)'),
        ],
        [],
    ),
    (
        Emotion.ANGRY,
        [
            _keywords('angry', 'mad', 'furious', 'hate', 'annoyed', 'damn',
                      'hurry', 'immediately'),
            re.compile(r'!!'),
        ],
        # Shouting only survives in the raw casing
        [re.compile(r'[A-Z]{4,}')],
    ),
    (
        Emotion.SAD,
        [
            _keywords('sad', 'tired', 'sorry', 'slow', 'slowly', 'unhappy',
                      'depressed', 'down', 'gently', 'please'),
            re.compile(r':\('),
        ],
        [],
    ),
]


def classify_audio(features: Optional[AudioFeatures],
                   thresholds: Optional[EmotionThresholds] = None) -> Emotion:
    """Classify live voice energy into an emotion."""
    if features is None:
        return Emotion.NEUTRAL
    t = thresholds or EmotionThresholds()
    avg = features.average_level
    peak = features.peak_level

    if peak > t.peak_high and avg > t.avg_mid:
        return Emotion.ANGRY
    if peak > t.peak_mid and avg > t.avg_mid:
        return Emotion.HAPPY
    if avg < t.avg_low and peak < t.peak_low:
        return Emotion.SAD
    return Emotion.NEUTRAL


def classify_text(text: Optional[str]) -> Emotion:
    """Classify a recognized utterance by keyword and punctuation cues."""
    if not text:
        return Emotion.NEUTRAL

    lowered = text.lower()
    for emotion, lower_patterns, raw_patterns in TEXT_EMOTION_RULES:
        if any(p.search(lowered) for p in lower_patterns):
            return emotion
        if any(p.search(text) for p in raw_patterns):
            return emotion
    return Emotion.NEUTRAL


def classify_waveform(summary: Optional[WaveformSummary]) -> Emotion:
    """Classify an uploaded waveform by RMS and peak amplitude."""
    if summary is None:
        return Emotion.NEUTRAL
    rms = summary.rms
    peak = summary.max_amplitude

    if rms > 0.3 and peak > 0.7:
        return Emotion.ANGRY
    if rms > 0.2 and peak > 0.5:
        return Emotion.HAPPY
    if rms < 0.1 and peak < 0.3:
        return Emotion.SAD
    return Emotion.NEUTRAL


def fuse_emotion(audio_emotion: Emotion, text_emotion: Emotion) -> Emotion:
    """Sustained vocal energy wins over lexical content when it is non-neutral."""
    if audio_emotion is not Emotion.NEUTRAL:
        return audio_emotion
    return text_emotion

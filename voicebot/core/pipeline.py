"""
Command pipeline - turns one recognized utterance into one robot step.
"""

import logging
from typing import Optional

from .types import CommandResult, Emotion
from ..models.robot import RobotSimulator
from ..voice.emotion import classify_text, classify_waveform, fuse_emotion
from ..voice.features import decode_audio, summarize_waveform
from ..voice.intent import classify_intent

logger = logging.getLogger(__name__)


def process_utterance(robot: RobotSimulator,
                      text: Optional[str],
                      audio_emotion: Emotion = Emotion.NEUTRAL) -> CommandResult:
    """
    Classify an utterance, fuse emotions and apply exactly one step.

    Args:
        robot: Simulation context to move
        text: Recognized utterance
        audio_emotion: Latest estimate from the audio path

    Returns:
        The committed intent/emotion, applied motion and resulting pose
    """
    transcript = (text or "").strip()
    intent = classify_intent(transcript)
    text_emotion = classify_text(transcript)
    emotion = fuse_emotion(audio_emotion, text_emotion)

    command = robot.step(intent, emotion)
    logger.info(
        f"Committed '{transcript}' -> intent={intent.value}, emotion={emotion.value} "
        f"(audio={audio_emotion.value}, text={text_emotion.value})"
    )
    return CommandResult(
        transcript=transcript,
        intent=intent,
        emotion=emotion,
        audio_emotion=audio_emotion,
        text_emotion=text_emotion,
        command=command,
        pose=robot.snapshot(),
    )


def process_upload(robot: RobotSimulator, data: bytes, transcriber) -> CommandResult:
    """
    Run the upload path: decode, summarize loudness, transcribe, commit.

    Args:
        robot: Simulation context to move
        data: Raw uploaded file contents
        transcriber: Object with transcribe(samples, sample_rate) -> str
    """
    samples, sample_rate = decode_audio(data)
    summary = summarize_waveform(samples, sample_rate)
    audio_emotion = classify_waveform(summary)
    logger.debug(
        f"Upload summary: rms={summary.rms:.3f}, peak={summary.max_amplitude:.3f}, "
        f"duration={summary.duration:.2f}s -> {audio_emotion.value}"
    )

    transcript = transcriber.transcribe(samples, sample_rate)
    return process_utterance(robot, transcript, audio_emotion)

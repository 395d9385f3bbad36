#!/usr/bin/env python3
"""
Voice-to-Robot Control - Main Application Entry Point
Turns short spoken commands into simulated robot motion, scaled by a
crude emotion estimate from voice loudness and keywords.

Modes:
- default     HTTP demo server with the browser client
- --headless  scripted session against replayed audio frames
- --listen    one live session using the local microphone

Python: 3.11+
"""

import sys
import argparse
import asyncio
import logging

from voicebot.core.config import Config, load_config
from voicebot.core.errors import VoiceBotError
from voicebot.utils.logger import setup_logging


def check_python_version():
    """Ensure compatible Python version."""
    if sys.version_info < (3, 11):
        print("❌ Python 3.11 or higher is required!")
        print(f"Current version: {sys.version}")
        sys.exit(1)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Voice-to-Robot Control demo")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--headless", action="store_true", help="Run a scripted session and exit")
    mode.add_argument("--listen", action="store_true", help="Run one microphone session and exit")
    return parser.parse_args(argv)


def run_server(config: Config):
    """Serve the browser client and HTTP API."""
    import uvicorn
    from voicebot.server.app import create_app

    app = create_app(config)
    print(f"🤖 {config.app_name} running at http://{config.server.host}:{config.server.port}")
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_config=None)


async def run_session(config: Config, session) -> None:
    """Run one listening session to completion and print what it committed."""
    from voicebot.core import event_bus as events

    done = asyncio.Event()

    def _on_committed(result):
        pose = result.pose
        print(f"🗣️  '{result.transcript}' -> {result.intent.value} ({result.emotion.value})")
        print(f"   Pose: x={pose.x:.2f} y={pose.y:.2f} heading={pose.heading:.2f} rad")

    def _on_error(message):
        print(f"⚠️  {message}")

    session.event_bus.subscribe(events.COMMAND_COMMITTED, _on_committed)
    session.event_bus.subscribe(events.RECOGNITION_ERROR, _on_error)
    session.event_bus.subscribe(events.CAPTURE_ERROR, _on_error)
    session.event_bus.subscribe(events.LISTENING_STOPPED, done.set)

    await session.start_listening()
    await done.wait()
    await session.shutdown()


def build_headless_session(config: Config):
    from voicebot.core.session import RobotSession
    from voicebot.models.robot import RobotSimulator
    from voicebot.voice.capture import StaticSpectrum
    from voicebot.voice.speech import SimulatedTranscriber

    # A loud frame followed by quiet ones
    frames = [[200] * 64 + [40] * 64, [20] * 128]
    return RobotSession(
        robot=RobotSimulator(config.motion),
        spectrum_source=StaticSpectrum(frames),
        recognizer=SimulatedTranscriber(config.speech.phrases, delay=1.0),
        config=config.audio,
    )


def build_microphone_session(config: Config):
    from voicebot.core.session import RobotSession
    from voicebot.models.robot import RobotSimulator
    from voicebot.voice.capture import MicrophoneSpectrum
    from voicebot.voice.speech import SpeechManager

    return RobotSession(
        robot=RobotSimulator(config.motion),
        spectrum_source=MicrophoneSpectrum(config.audio),
        recognizer=SpeechManager(config.speech, device_index=config.audio.device_index),
        config=config.audio,
    )


def main(argv=None):
    """Main application entry point."""
    check_python_version()
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except VoiceBotError as e:
        print(f"❌ {e.message}")
        sys.exit(1)

    setup_logging(config.log_level, config.log_dir)
    logger = logging.getLogger(__name__)
    logger.info(f"Configuration loaded: {config.app_name}")

    try:
        if args.headless:
            asyncio.run(run_session(config, build_headless_session(config)))
        elif args.listen:
            print("🎙️  Speak a command...")
            asyncio.run(run_session(config, build_microphone_session(config)))
        else:
            run_server(config)
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        print("\n👋 Goodbye!")
    except VoiceBotError as e:
        logger.error(f"Application error: {e.message}")
        print(f"❌ {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()

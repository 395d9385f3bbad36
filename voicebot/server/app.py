"""
HTTP demo server.

Serves the browser client and exposes the command pipeline:
- POST /process-audio  offline demo: uploaded audio, simulated transcript
- POST /command        browser path: client-side transcript plus energy levels
- GET  /state          current robot state and frame
- POST /reset          return the robot to the origin
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict, Field

from ..core.config import Config
from ..core.pipeline import process_upload, process_utterance
from ..core.types import AudioFeatures, CommandResult, Emotion
from ..graphics.renderer import SvgRenderer
from ..models.robot import RobotSimulator
from ..voice.emotion import classify_audio
from ..voice.speech import SimulatedTranscriber

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


# =============================================================================
# Request Models
# =============================================================================


class CommandRequest(BaseModel):
    """Recognized utterance from the browser with its latest energy sample."""

    model_config = ConfigDict(populate_by_name=True)

    transcript: str = ""
    average_level: Optional[float] = Field(None, ge=0, alias="averageLevel")
    peak_level: Optional[float] = Field(None, ge=0, alias="peakLevel")


# =============================================================================
# Application State
# =============================================================================


class AppState:
    """Single simulated robot shared by every request of this process."""

    def __init__(self, config: Config):
        self.config = config
        self.robot = RobotSimulator(config.motion)
        self.renderer = SvgRenderer(config.render)
        # The upload path never does real speech-to-text
        self.transcriber = SimulatedTranscriber(config.speech.phrases)
        self.last_emotion = Emotion.NEUTRAL

    def command_response(self, result: CommandResult) -> Dict[str, Any]:
        self.last_emotion = result.emotion
        return {
            "transcript": result.transcript,
            "emotion": result.emotion.value,
            "intent": result.intent.value,
            "robotState": result.robot_state(),
            "frame": self.renderer.render(result.pose, result.emotion),
        }

    def state_response(self) -> Dict[str, Any]:
        pose = self.robot.snapshot()
        return {
            "robotState": {
                "position": pose.to_dict(),
                "emotion": self.last_emotion.value,
                "steps": self.robot.step_count,
            },
            "frame": self.renderer.render(pose, self.last_emotion),
        }


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# =============================================================================
# FastAPI Application
# =============================================================================


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Build the demo application with its own robot."""
    config = config or Config()

    app = FastAPI(
        title=config.app_name,
        description="Voice-to-robot control demo",
        version=config.version,
        debug=config.debug,
    )
    app.state.voicebot = AppState(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    static_dir = Path(config.server.static_dir or STATIC_DIR)
    if static_dir.is_dir():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")
    else:
        logger.warning(f"Static directory not found: {static_dir}")

    def get_state(request: Request) -> AppState:
        return request.app.state.voicebot

    @app.get("/")
    async def index():
        index_file = static_dir / "index.html"
        if not index_file.exists():
            return _error(404, "Client not installed")
        return FileResponse(index_file)

    @app.post("/process-audio")
    async def process_audio(request: Request, audio: Optional[UploadFile] = File(None)):
        """Run the offline demo pipeline on an uploaded recording."""
        state = get_state(request)
        if audio is None:
            return _error(400, "No audio file provided")

        limit = state.config.server.max_upload_bytes
        if audio.size is not None and audio.size > limit:
            return _error(413, "Audio file too large")

        try:
            # Never buffer more than one byte past the limit
            data = await audio.read(limit + 1)
            if len(data) > limit:
                return _error(413, "Audio file too large")

            result = process_upload(state.robot, data, state.transcriber)
            return state.command_response(result)
        except Exception as e:
            logger.error(f"Error processing audio: {e}", exc_info=True)
            return _error(500, "Failed to process audio")

    @app.post("/command")
    async def command(request: Request, body: CommandRequest):
        """Commit a transcript recognized in the browser."""
        state = get_state(request)
        audio_emotion = Emotion.NEUTRAL
        if body.average_level is not None and body.peak_level is not None:
            features = AudioFeatures(body.average_level, body.peak_level)
            audio_emotion = classify_audio(features, state.config.audio.thresholds)

        result = process_utterance(state.robot, body.transcript, audio_emotion)
        return state.command_response(result)

    @app.get("/state")
    async def robot_state(request: Request):
        return get_state(request).state_response()

    @app.post("/reset")
    async def reset(request: Request):
        state = get_state(request)
        state.robot.reset()
        state.last_emotion = Emotion.NEUTRAL
        return state.state_response()

    logger.info(f"{config.app_name} application created")
    return app

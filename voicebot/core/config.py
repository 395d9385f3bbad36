"""
Configuration management for the voice-to-robot demo.
Handles loading and validation of application settings.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional, List
from pydantic import BaseModel, Field, ValidationError
from dotenv import load_dotenv

from .errors import ConfigError

# Load environment variables
load_dotenv()

DEFAULT_CONFIG_FILE = "configs/config.yaml"


class EmotionThresholds(BaseModel):
    """Energy thresholds for the audio emotion path (0-255 magnitude scale)."""
    peak_high: float = 150.0
    peak_mid: float = 100.0
    avg_mid: float = 30.0
    avg_low: float = 10.0
    peak_low: float = 30.0


class AudioConfig(BaseModel):
    """Audio capture and feature sampling configuration."""
    sample_interval_ms: int = Field(200, gt=0)
    sample_rate: int = 16000
    fft_size: int = 256
    # Analyser dB window mapped onto 0..255
    min_decibels: float = -100.0
    max_decibels: float = -30.0
    device_index: Optional[int] = None
    thresholds: EmotionThresholds = Field(default_factory=EmotionThresholds)


class SpeechConfig(BaseModel):
    """Speech recognition configuration."""
    engine: str = "simulated"  # simulated, google
    language: str = "en-US"
    phrase_time_limit: float = 5.0
    timeout: float = 5.0
    phrases: List[str] = [
        "walk forward",
        "turn left",
        "turn right",
        "stop",
        "go back",
        "move forward",
        "turn around",
    ]


class MotionConfig(BaseModel):
    """Robot arena and integrator configuration."""
    min_x: float = -3.5
    max_x: float = 3.5
    min_y: float = -1.8
    max_y: float = 1.8
    step_scale: float = 0.1


class RenderConfig(BaseModel):
    """SVG frame configuration."""
    width: int = 400
    height: int = 300
    origin_x: float = 200.0
    origin_y: float = 150.0
    pixels_per_unit: float = 50.0


class ServerConfig(BaseModel):
    """HTTP demo server configuration."""
    host: str = "127.0.0.1"
    port: int = 3000
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB
    cors_origins: List[str] = ["*"]
    static_dir: Optional[Path] = None


class Config(BaseModel):
    """Main application configuration."""
    app_name: str = "Voice-to-Robot Control"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    # Component configurations
    audio: AudioConfig = Field(default_factory=AudioConfig)
    speech: SpeechConfig = Field(default_factory=SpeechConfig)
    motion: MotionConfig = Field(default_factory=MotionConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


def _env_overrides() -> Dict[str, Any]:
    """Collect overrides from environment variables."""
    env_overrides: Dict[str, Any] = {}

    if os.getenv('VOICEBOT_LOG_LEVEL'):
        env_overrides['log_level'] = os.getenv('VOICEBOT_LOG_LEVEL')

    # Server Configuration
    if os.getenv('VOICEBOT_HOST'):
        env_overrides.setdefault('server', {})['host'] = os.getenv('VOICEBOT_HOST')
    if os.getenv('VOICEBOT_PORT'):
        env_overrides.setdefault('server', {})['port'] = os.getenv('VOICEBOT_PORT')

    # Audio Configuration
    if os.getenv('VOICEBOT_SAMPLE_INTERVAL_MS'):
        env_overrides.setdefault('audio', {})['sample_interval_ms'] = os.getenv('VOICEBOT_SAMPLE_INTERVAL_MS')

    # Speech Configuration
    if os.getenv('VOICEBOT_SPEECH_ENGINE'):
        env_overrides.setdefault('speech', {})['engine'] = os.getenv('VOICEBOT_SPEECH_ENGINE')

    return env_overrides


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            base[key] = deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(config_file: Optional[str] = None) -> Config:
    """Load configuration from file or environment variables."""

    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_path = Path(config_file)

    # Load from YAML if exists
    config_data = {}
    if config_path.exists() and config_path.suffix in ['.yaml', '.yml']:
        import yaml
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(config_data, dict):
            raise ConfigError(f"Top level of {config_path} must be a mapping")

    final_config = deep_merge(config_data, _env_overrides())

    try:
        return Config(**final_config)
    except ValidationError as e:
        raise ConfigError("Invalid configuration", {"errors": e.errors()}) from e


def save_config(config: Config, config_file: str = DEFAULT_CONFIG_FILE):
    """Save configuration to YAML file."""
    import yaml

    config_path = Path(config_file)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump(mode="json")

    with open(config_path, 'w') as f:
        yaml.dump(config_dict, f, default_flow_style=False, indent=2)

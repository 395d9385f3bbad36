"""
Logger utility - Configures application logging.
Console output plus rotating log files under the configured log directory.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Iterable, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'

# Third-party loggers that are noisy at INFO while the demo is running
QUIET_LOGGERS = ("multipart", "python_multipart", "uvicorn.access")


def setup_logging(log_level: str = "INFO",
                  log_dir: Union[str, Path] = "logs",
                  console: bool = True,
                  quiet_loggers: Iterable[str] = QUIET_LOGGERS):
    """
    Setup application logging.

    Args:
        log_level: Level name for the root logger and the main log file
        log_dir: Directory receiving voicebot.log and errors.log
        console: Also log to stderr
        quiet_loggers: Logger names raised to WARNING
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(min(level, logging.INFO))
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(console_handler)

    file_format = logging.Formatter(FILE_LOG_FORMAT)

    file_handler = logging.handlers.RotatingFileHandler(
        log_path / 'voicebot.log',
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(file_format)
    root_logger.addHandler(file_handler)

    error_handler = logging.handlers.RotatingFileHandler(
        log_path / 'errors.log',
        maxBytes=5*1024*1024,  # 5MB
        backupCount=3
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(file_format)
    root_logger.addHandler(error_handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured (level={logging.getLevelName(level)}, dir={log_path})")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)

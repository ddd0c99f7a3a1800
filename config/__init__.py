"""Configuration module for tcsync."""

from .logger import get_session_logger, setup_session_logging
from .settings import Config, LogLevel


def setup_logging(config: Config):
    """Setup logging configuration using the session-based system."""
    return setup_session_logging(config)


__all__ = [
    "Config",
    "LogLevel",
    "setup_logging",
    "get_session_logger",
]

"""Session-based logging for tcsync with verbose controls."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger


class SessionLogger:
    """Manages session-specific logging with timestamp-based separation."""

    def __init__(self, config):
        self.config = config
        self.session_id = self._generate_session_id()
        self.base_log_dir = Path(config.log_dir)
        self.session_log_dir = self.base_log_dir / f"session_{self.session_id}"

        self.base_log_dir.mkdir(parents=True, exist_ok=True)
        self.session_log_dir.mkdir(exist_ok=True)

        self._setup_loggers()

        logger.debug(f"Session logging initialized. Session ID: {self.session_id}")

    def _generate_session_id(self) -> str:
        """Generate a unique session ID based on timestamp."""
        return datetime.now().strftime("%Y%m%d_%H%M%S")

    def _setup_loggers(self):
        """Setup all sinks with session-specific configuration."""
        logger.remove()

        console_level = "DEBUG" if self.config.verbose else self.config.log_level.value
        logger.add(
            sys.stderr,
            level=console_level,
            format=self._get_console_format(),
            colorize=True,
            filter=self._console_filter,
        )

        # Main session log always captures everything
        logger.add(
            str(self.session_log_dir / "main.log"),
            level="DEBUG",
            format=self._get_file_format(),
            rotation=self.config.log_rotation,
            retention=self.config.log_retention,
            compression="gz",
        )

        logger.add(
            str(self.session_log_dir / "errors.log"),
            level="ERROR",
            format=self._get_file_format(),
            rotation="10 MB",
            retention="90 days",
        )

        if self.config.verbose:
            logger.add(
                str(self.session_log_dir / "debug_verbose.log"),
                level="TRACE",
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
                rotation="200 MB",
                retention="3 days",
                filter=lambda record: record["level"].name in ["TRACE", "DEBUG"],
            )

        if self.config.log_file:
            legacy_log_path = Path(self.config.log_file)
            legacy_log_path.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                str(legacy_log_path),
                level="INFO",
                format=self._get_file_format(),
                rotation=self.config.log_rotation,
                retention=self.config.log_retention,
                compression="gz",
            )

    def _get_console_format(self) -> str:
        """Get console log format based on verbose setting."""
        if self.config.verbose:
            return ("<green>{time:HH:mm:ss.SSS}</green> | "
                    "<level>{level: <8}</level> | "
                    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                    "<level>{message}</level>")
        return ("<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<level>{message}</level>")

    def _get_file_format(self) -> str:
        """Get file log format."""
        return "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"

    def _console_filter(self, record):
        """Filter console output based on verbose setting."""
        if record["level"].no >= 20:  # INFO
            return True
        return bool(self.config.verbose and record["level"].no >= 10)

    def get_session_summary(self) -> dict:
        """Get a summary of the current logging session."""
        log_files = list(self.session_log_dir.glob("*.log"))
        return {
            "session_id": self.session_id,
            "session_dir": str(self.session_log_dir),
            "verbose_enabled": self.config.verbose,
            "log_level": self.config.log_level.value,
            "log_files": [
                {
                    "name": f.name,
                    "size": f.stat().st_size if f.exists() else 0,
                    "path": str(f),
                }
                for f in log_files
            ],
        }


# Global session logger instance
_session_logger: Optional[SessionLogger] = None


def setup_session_logging(config) -> SessionLogger:
    """Setup session-based logging system."""
    global _session_logger
    _session_logger = SessionLogger(config)
    return _session_logger


def get_session_logger() -> Optional[SessionLogger]:
    """Get the current session logger."""
    return _session_logger


"""Configuration settings for tcsync."""

import os
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class LogLevel(str, Enum):
    """Log levels accepted by the console sink."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class Config(BaseModel):
    """Main configuration class."""

    # Test runner configuration
    workspace_folder: str = Field(default=".")
    config_file: str = Field(default="playwright.config.ts")
    runner_cli: str = Field(default="tcsync-runner")
    runner_timeout: float = Field(default=120.0)  # seconds, per runner invocation

    # Workspace watching
    watch_debounce_ms: int = Field(default=250)

    # Logging configuration
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_dir: str = Field(default="logs")
    log_file: Optional[str] = Field(default=None)
    verbose: bool = Field(default=False)
    log_rotation: str = Field(default="20 MB")
    log_retention: str = Field(default="14 days")

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        env_file = Path(".env")
        if env_file.exists():
            load_dotenv(env_file)

        return cls(
            workspace_folder=os.getenv("TCS_WORKSPACE", "."),
            config_file=os.getenv("TCS_CONFIG_FILE", "playwright.config.ts"),
            runner_cli=os.getenv("TCS_RUNNER_CLI", "tcsync-runner"),
            runner_timeout=float(os.getenv("TCS_RUNNER_TIMEOUT", "120")),
            watch_debounce_ms=int(os.getenv("TCS_WATCH_DEBOUNCE_MS", "250")),
            log_level=LogLevel(os.getenv("TCS_LOG_LEVEL", "INFO")),
            log_dir=os.getenv("TCS_LOG_DIR", "logs"),
            log_file=os.getenv("TCS_LOG_FILE"),
            verbose=os.getenv("TCS_VERBOSE", "false").lower() in ("true", "1", "yes"),
            log_rotation=os.getenv("TCS_LOG_ROTATION", "20 MB"),
            log_retention=os.getenv("TCS_LOG_RETENTION", "14 days"),
        )

    @property
    def watch_debounce_seconds(self) -> float:
        return self.watch_debounce_ms / 1000.0

    def resolve_config_file(self) -> str:
        """Return the runner config file path, anchored at the workspace folder."""
        path = Path(self.config_file)
        if not path.is_absolute():
            path = Path(self.workspace_folder) / path
        return str(path)

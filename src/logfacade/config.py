"""
Logging Configuration.
"""

from __future__ import annotations

from enum import Enum

import orjson
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_MAX_AGE_DAYS, DEFAULT_MAX_BACKUPS, DEFAULT_MAX_SIZE_MB


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class LoggerConfig(BaseSettings):
    """Logger configuration.

    Every option can be given as a keyword, through ``LOG_*`` environment
    variables, or as a JSON document keyed ``log_level``, ``log_path`` ...
    (see :meth:`from_json`). Zero rotation values mean "use the default".
    """

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: str = Field(default="info", description="Minimum severity (trace, debug, info, warn, error)")
    path: str = Field(default=".", description="Directory holding the log file")
    name: str = Field(default="app", description="Log file base name, written as <path>/<name>.log")
    max_size: int = Field(default=0, ge=0, description="Rotation size in megabytes")
    max_backup: int = Field(default=0, ge=0, description="Rotated files to retain")
    max_age: int = Field(default=0, ge=0, description="Days to retain rotated files")
    compress: bool = Field(default=False, description="Gzip rotated files")
    caller: bool = Field(default=False, description="Prefix messages with [file:line]")
    format: LogFormat = Field(default=LogFormat.CONSOLE, description="Record encoding")
    stdio: bool = Field(default=False, description="Mirror records to standard output")

    @classmethod
    def from_json(cls, data: str | bytes) -> LoggerConfig:
        """Load a ``{"log_level": ..., "log_path": ...}`` style document."""
        options = {}
        for key, value in orjson.loads(data).items():
            if key.startswith("log_"):
                key = key[len("log_") :]
            options[key] = value
        return cls(**options)

    def resolve_rotation(self) -> tuple[int, int, int]:
        """Return ``(max_size_mb, max_backups, max_age_days)`` with defaults applied."""
        return (
            self.max_size or DEFAULT_MAX_SIZE_MB,
            self.max_backup or DEFAULT_MAX_BACKUPS,
            self.max_age or DEFAULT_MAX_AGE_DAYS,
        )

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from vulnrisk_cli.exceptions import ConfigError

DEFAULT_OUTPUT_DIR = "reports"
DEFAULT_TTL_MINUTES = 60
DEFAULT_LOG_LEVEL = "WARNING"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AppConfig:
    output_dir: str = DEFAULT_OUTPUT_DIR
    ttl_minutes: int = DEFAULT_TTL_MINUTES
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        self.output_dir = self.output_dir.strip()
        if not self.output_dir:
            raise ConfigError("Report directory cannot be empty.")
        if self.ttl_minutes <= 0:
            raise ConfigError("Retention must be a positive number of minutes.")
        self.log_level = self.log_level.strip().upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(
                f"Unknown log level '{self.log_level}'. "
                f"Use one of: {', '.join(_LOG_LEVELS)}."
            )

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.ttl_minutes)

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)

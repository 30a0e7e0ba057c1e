"""Logging configuration."""

import logging
import os
import sys
from collections.abc import MutableMapping
from typing import Any

from pydantic import BaseModel, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LogConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # HTTP clients and the ORM log every request at INFO
    quiet_loggers: tuple[str, ...] = ("anthropic", "httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")
    quiet_level: str = "WARNING"

    @field_validator("level", "quiet_level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
        return level


def setup_logging(config: LogConfig | None = None) -> None:
    """Set up logging configuration for the application."""
    if config is None:
        config = LogConfig()

    logging.basicConfig(
        level=config.level,
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(config.quiet_level)


class TurnLogger(logging.LoggerAdapter):
    """Prefixes every message with the chat turn id, so one turn can be followed across modules."""

    def __init__(self, logger: logging.Logger, turn_id: str):
        super().__init__(logger, {"turn_id": turn_id})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['turn_id']}] {msg}", kwargs


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Module name (typically __name__)
        level: Optional explicit level, otherwise LOG_LEVEL or INFO

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    log_level = level if level else os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(log_level.upper())

    return logger

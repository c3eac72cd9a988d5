"""
Logging setup and the structured event helper used by the extraction steps.
"""
from __future__ import annotations

import copy
import logging
import logging.config
from typing import Any

from cbt_insights.core.config import Settings


LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "detailed": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "detailed",
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}

FILE_HANDLER: dict[str, Any] = {
    "class": "logging.handlers.RotatingFileHandler",
    "maxBytes": 10485760,  # 10MB
    "backupCount": 5,
    "level": "DEBUG",
    "formatter": "detailed",
}


def build_logging_config(settings: Settings) -> dict[str, Any]:
    config = copy.deepcopy(LOGGING_CONFIG)
    config["root"]["level"] = settings.LOG_LEVEL
    if settings.LOG_FILE:
        config["handlers"]["file"] = {**FILE_HANDLER, "filename": settings.LOG_FILE}
        config["root"]["handlers"].append("file")
    return config


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    logging.config.dictConfig(build_logging_config(settings))


_therapy_logger = logging.getLogger("cbt_insights.therapy")


class _EventFields:
    __slots__ = ("fields",)

    def __init__(self, fields: dict[str, Any]):
        self.fields = fields

    def __str__(self) -> str:
        return " ".join(f"{key}={value}" for key, value in sorted(self.fields.items()))


def therapeutic_operation(event: str, **fields: Any) -> None:
    """
    Emit one INFO record describing an extraction step.

    Fields must be counts and flags, never message text. Rendering is deferred
    to the handler, so a failure while formatting goes through logging's own
    error handling and never reaches the caller.
    """
    _therapy_logger.info("%s %s", event, _EventFields(fields))

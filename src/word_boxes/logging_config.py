"""Logging configuration for the command-line entrypoints."""

from __future__ import annotations

import logging.config
import os
from typing import Any, Dict

_logging_configured = False

_PACKAGES = ("word_boxes", "layout_engine")


def _level_for(verbosity: int) -> str:
    env_level = os.getenv("WORD_BOXES_LOG_LEVEL")
    if env_level:
        return env_level.upper()
    if verbosity >= 2:
        return "DEBUG"
    if verbosity == 1:
        return "INFO"
    return "WARNING"


def configure_logging(verbosity: int = 0) -> None:
    """Console logging on stderr; later calls only adjust the level."""
    global _logging_configured

    level = _level_for(verbosity)
    if _logging_configured:
        for name in _PACKAGES:
            logging.getLogger(name).setLevel(level)
        return

    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            name: {"handlers": ["console"], "level": level, "propagate": False} for name in _PACKAGES
        },
    }

    logging.config.dictConfig(logging_config)
    _logging_configured = True

"""Logging setup shared by the HTTP and MCP entrypoints."""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Dict


LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def build_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Return a ``dictConfig`` mapping with a single stderr handler."""

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "playlist_tracker": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
    }


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Configure package logging and return the package logger."""

    logging.config.dictConfig(build_logging_config(level))
    logger = logging.getLogger("playlist_tracker")
    logger.debug("Logger configured at level %s", level)
    return logger

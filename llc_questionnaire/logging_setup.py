"""Central logging configuration for the questionnaire service.

Applies a root stdout handler so every `llc_questionnaire.*` module logger
emits without per-module setup. The level defaults to INFO and follows the
LOG_LEVEL environment variable. Uvicorn loggers share the same handler and
repeated calls (reloaders, test sessions) never stack duplicate handlers.
"""
from __future__ import annotations

import logging
import os
from logging.config import dictConfig


def _build_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "llc_questionnaire": {"level": level},
            "sqlalchemy.engine": {"level": "WARNING"},
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging() -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers, return to prevent duplicate output.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    dictConfig(_build_config(level))


__all__ = ["configure_logging"]

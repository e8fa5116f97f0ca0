"""Central logging configuration for the reorder package.

Applies a root stdout handler so all module loggers emit INFO-level logs
without per-module setup. The ``reorder`` logger level can be tuned on its
own (``REORDER_LOG_LEVEL``, e.g. DEBUG to see cache hits), httpx request
logging stays at WARNING so reorder events remain readable, and repeated
calls never add duplicate handlers.
"""
from __future__ import annotations
import logging
import os
from logging.config import dictConfig
from typing import Optional

PACKAGE_LOGGER = "reorder"
LOG_LEVEL_ENV = "REORDER_LOG_LEVEL"
DEFAULT_LEVEL = "INFO"


def build_logging_config(level: str = DEFAULT_LEVEL) -> dict:
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
                "level": "DEBUG",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "INFO", "handlers": ["console"]},
        "loggers": {
            PACKAGE_LOGGER: {"level": level},
            "httpx": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            "httpcore": {"level": "WARNING", "handlers": ["console"], "propagate": False},
        },
    }


def _resolve_level(level: Optional[str]) -> str:
    text = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(text), int):
        raise ValueError(f"Unknown log level: {text}")
    return text


def configure_logging(level: Optional[str] = None) -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers (a host application configured
    logging first) only the ``reorder`` logger level is applied, so output is
    never duplicated.
    """
    resolved = _resolve_level(level)
    root = logging.getLogger()
    if root.handlers:
        logging.getLogger(PACKAGE_LOGGER).setLevel(resolved)
        return
    dictConfig(build_logging_config(resolved))


__all__ = ["configure_logging", "build_logging_config", "LOG_LEVEL_ENV", "PACKAGE_LOGGER"]

from __future__ import annotations

import logging.config
import os
import sys
from typing import Any, Dict


# Reminder code logs under "medportal.*"; the HTTP and scheduler libraries are
# chatty at INFO (one line per poll tick and per provider call).
APP_LOGGER = "medportal"
LIBRARY_LOGGERS = ("httpx", "httpcore", "apscheduler")
DESTINATIONS = ("stdout", "stderr", "file")


def _level(name: str, default: str) -> str:
    return os.getenv(name, default).upper()


def _handler_config(destination: str, level: str) -> Dict[str, Any]:
    if destination not in DESTINATIONS:
        raise RuntimeError(
            f"LOG_DESTINATION must be one of {', '.join(DESTINATIONS)}, got {destination!r}"
        )
    if destination == "file":
        log_file = os.getenv("LOG_FILE")
        if not log_file:
            raise RuntimeError("LOG_FILE is required when LOG_DESTINATION=file")
        return {
            "class": "logging.FileHandler",
            "level": level,
            "filename": log_file,
            "formatter": "keyvalue",
        }
    return {
        "class": "logging.StreamHandler",
        "level": level,
        "stream": sys.stdout if destination == "stdout" else sys.stderr,
        "formatter": "keyvalue",
    }


def build_logging_config() -> Dict[str, Any]:
    level = _level("LOG_LEVEL", "INFO")
    library_level = _level("LOG_LIBRARY_LEVEL", "WARNING")
    destination = os.getenv("LOG_DESTINATION", "stdout").lower()

    loggers: Dict[str, Any] = {name: {"level": library_level} for name in LIBRARY_LOGGERS}
    loggers[APP_LOGGER] = {"level": level}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "keyvalue": {"format": "%(asctime)s level=%(levelname)s logger=%(name)s %(message)s"}
        },
        "handlers": {"default": _handler_config(destination, level)},
        "loggers": loggers,
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging() -> None:
    logging.config.dictConfig(build_logging_config())

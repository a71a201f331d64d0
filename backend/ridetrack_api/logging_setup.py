from __future__ import annotations

import logging
import time

from pythonjsonlogger.json import JsonFormatter

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", json_format: bool = False) -> logging.Logger:
    """Install a single stream handler on the package logger."""
    logger = logging.getLogger("ridetrack_api")
    logger.setLevel(level.upper())
    logger.handlers.clear()

    if json_format:
        formatter: logging.Formatter = JsonFormatter(
            fmt=PLAIN_FORMAT,
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
    else:
        formatter = logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")
    # asctime in UTC to match the Z suffix
    formatter.converter = time.gmtime
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger

"""Logging-Konfiguration für den Client."""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", json_format: bool = False) -> logging.Logger:
    logger = logging.getLogger("ridetrack_desktop")
    logger.setLevel(level.upper())
    logger.handlers.clear()

    if json_format:
        formatter: logging.Formatter = JsonFormatter(fmt=PLAIN_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    else:
        formatter = logging.Formatter(PLAIN_FORMAT)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging"]

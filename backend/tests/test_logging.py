from __future__ import annotations

import logging
import time

import pytest

from ridetrack_api.logging_setup import configure_logging


@pytest.mark.parametrize("json_format", [False, True])
def test_timestamps_are_utc(json_format):
    logger = configure_logging("INFO", json_format=json_format)
    try:
        formatter = logger.handlers[0].formatter
        assert formatter.converter is time.gmtime
        record = logging.LogRecord("ridetrack_api", logging.INFO, __file__, 1, "hello", None, None)
        record.created = 0.0
        assert formatter.formatTime(record, formatter.datefmt) == "1970-01-01T00:00:00Z"
    finally:
        logger.handlers.clear()

"""Logging setup for the scheduler package.

Cloud Functions forwards JSON lines written to stdout/stderr to Cloud Logging
as structured entries, with ``severity`` mapped to the log level.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from .config import SchedulerConfig

PACKAGE_LOGGER = "cloudsql_scheduler"

_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(config: SchedulerConfig) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Calling it again replaces the previous handler, so warm function instances
    pick up the current config without duplicating output.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(config.log_level)

    for handler in list(logger.handlers):
        if getattr(handler, "_scheduler_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler._scheduler_handler = True  # type: ignore[attr-defined]
    if config.structured_logging:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    logger.addHandler(handler)
    return logger

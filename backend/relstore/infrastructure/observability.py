"""Structured Logging — JSON formatter and setup for the engine's module loggers.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (collection, entity_id, error_code, operation) surfaced when present
    - JSON format for machines, human-readable text for development

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once by the host with settings.log_level and settings.log_format
"""

import logging
import json
from datetime import datetime, timezone

EXTRA_FIELDS = ("collection", "entity_id", "error_code", "operation")


class JSONFormatter(logging.Formatter):
    """Format logs as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install one stream handler on the relstore logger. Returns it."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logger = logging.getLogger("relstore")
    for existing in list(logger.handlers):
        if getattr(existing, "_relstore_handler", False):
            logger.removeHandler(existing)
    handler._relstore_handler = True
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler

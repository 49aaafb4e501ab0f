"""Structured Logging — JSON formatter and setup for store observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (table, command, error_code, lock_age) surfaced when present
    - JSON format in production, human-readable in development
    - enabled=False silences the jsdb logger hierarchy without touching others

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called once by the embedding application (or build_dispatcher)
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_FIELDS = ("table", "command", "error_code", "lock_age", "path")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json", enabled: bool = True):
    """Configure the jsdb logger hierarchy."""
    logger = logging.getLogger("jsdb")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    if not enabled:
        logger.setLevel(logging.CRITICAL + 1)
        return
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logger.addHandler(handler)
    logger.propagate = False
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

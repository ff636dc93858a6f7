"""Structured Logging — JSON lines for sync, catalog and endpoint events.

Invariants:
    - Every line carries timestamp, level, logger and message
    - Sync context passed via extra= (diagram_id, operation, status_code,
      error_code, diagram_count, path) is lifted to top-level keys when set
    - setup_logging is idempotent: a second call replaces our handler

Design Decisions:
    - Sync failures are only observable here and through coordinator
      callbacks, never as modal errors, so the extras carry the diagnosis
    - fmt="text" for local runs, anything else falls back to JSON
"""

import json
import logging
from datetime import datetime, timezone

_HANDLER_NAME = "chartdb_sync"

SYNC_LOG_FIELDS = (
    "diagram_id", "operation", "status_code", "error_code",
    "diagram_count", "path",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            name: getattr(record, name)
            for name in SYNC_LOG_FIELDS
            if getattr(record, name, None) is not None
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "text":
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        ))
    else:
        handler.setFormatter(JSONFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

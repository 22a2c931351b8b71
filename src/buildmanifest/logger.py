"""
Logging setup for buildmanifest.

Library modules only call logging.getLogger(__name__). The CLI calls
configure_logging() once, which attaches a single stderr handler to the
"buildmanifest" logger in either plain text or JSON-lines format.

JSON entries look like:
    {"timestamp": "...", "level": "info", "logger": "buildmanifest.attributes",
     "message": "Could not resolve manifest SCM attributes. Using fallback. (...)"}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

ROOT_LOGGER = "buildmanifest"

_TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            entry["error"] = f"{type(error).__name__}: {error}"
        return json.dumps(entry, default=str)


def configure_logging(
    level: str = "warning",
    fmt: str = "text",
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Install the buildmanifest handler, replacing any earlier one."""
    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(level.upper())
    log.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    log.addHandler(handler)
    return log

"""Logging helpers for structured server logs."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

EXTRA_FIELDS = ("client_ip", "host", "method", "path", "status", "retry_after")


class JsonFormatter(logging.Formatter):
    """Render log records as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for attr in EXTRA_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                payload[attr] = value
        return json.dumps(payload)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> None:
    """Configure root logger with JSON formatting.

    ``quiet`` keeps only critical startup failures; no request is ever logged.
    ``verbose`` lowers the level to DEBUG so rate limiter activity shows up.
    """

    formatter = JsonFormatter()
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file and not quiet:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    if quiet:
        level = logging.CRITICAL
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(level=level, handlers=handlers, force=True)

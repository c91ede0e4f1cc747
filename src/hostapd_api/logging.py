"""Structured JSON logging for the hostapd API service."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hostapd_api.parser import Event

logger = logging.getLogger(__name__)

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        obj: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Only user-supplied ``extra`` fields are merged in.
        _standard = set(logging.LogRecord("", 0, "", 0, None, None, None).__dict__)
        for key, value in record.__dict__.items():
            if key not in _standard and key not in obj:
                obj[key] = value

        if record.exc_info:
            obj["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(obj, default=str)


def setup_logging(
    *,
    handler: logging.Handler | None = None,
    level: int | str = logging.INFO,
    json_logs: bool = True,
) -> None:
    """Configure the root logger.

    Parameters
    ----------
    handler:
        A logging handler to attach. When *None* (the default) a
        ``StreamHandler`` writing to ``stderr`` is used.
    level:
        The log level to set on the root logger.
    json_logs:
        Emit one JSON object per line instead of plain text.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if handler is None:
        handler = logging.StreamHandler(sys.stderr)

    if json_logs:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    root.addHandler(handler)


def log_witness(event: Event) -> None:
    """Log a witnessed association event as a structured record."""
    logger.info(
        "witness",
        extra={
            "action": event.action.value,
            "mac": event.mac,
            "host": event.host,
            "interface": event.interface,
            "event_ts": event.timestamp.isoformat(),
        },
    )

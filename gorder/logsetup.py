"""Log output formatting for the services."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_RESERVED = frozenset({"level", "time", "message"})
_LEVEL_NAMES = {"CRITICAL": "fatal"}
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_TEXT_FORMAT = "[%(asctime)s] %(levelname)8s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with extra fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {}
        for key, value in vars(record).items():
            if key in _STANDARD_ATTRS:
                continue
            entry[f"fields.{key}" if key in _RESERVED else key] = value
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        entry["level"] = _LEVEL_NAMES.get(record.levelname, record.levelname.lower())
        entry["message"] = record.getMessage()
        entry["time"] = (
            datetime.fromtimestamp(record.created, tz=timezone.utc)
            .astimezone()
            .isoformat(timespec="seconds")
        )
        return json.dumps(entry, default=str, sort_keys=True)


class _ServiceHandler(logging.StreamHandler):
    """Console handler installed by :func:`set_formatter`."""


def _is_local() -> bool:
    return os.environ.get("LOCAL_ENV", "") in _TRUE


def set_formatter(logger: logging.Logger) -> None:
    """Give ``logger`` a console handler: JSON, or plain text when LOCAL_ENV is true."""
    handler = next((h for h in logger.handlers if isinstance(h, _ServiceHandler)), None)
    if handler is None:
        handler = _ServiceHandler(sys.stderr)
        logger.addHandler(handler)
    if _is_local():
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    else:
        handler.setFormatter(JsonFormatter())


def init_logging() -> None:
    """Configure the root logger at debug level."""
    root = logging.getLogger()
    set_formatter(root)
    root.setLevel(logging.DEBUG)
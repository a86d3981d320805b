"""
Logging setup.

Records are written to stdout either as one JSON object per line or as a
single console line. In both forms the ``extra={...}`` context passed to a
logger call is kept.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Attribute names every LogRecord carries; anything else came from ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}

_APP_LOGGERS = ("property_lookup", "uvicorn", "uvicorn.access", "uvicorn.error")


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    return {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}


def _timestamp(record: logging.LogRecord) -> str:
    moment = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JSONExtraFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` context under ``"extra"``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = _record_context(record)
        if context:
            entry["extra"] = context
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ConsoleExtraFormatter(logging.Formatter):
    """``<time> LEVEL logger: message {extra}``, traceback on the following lines."""

    def format(self, record: logging.LogRecord) -> str:
        line = f"{_timestamp(record)} {record.levelname} {record.name}: {record.getMessage()}"
        context = _record_context(record)
        if context:
            line = f"{line} {json.dumps(context, ensure_ascii=False, default=str)}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: int | str | None = None, *, use_json: bool = True) -> None:
    """Install a single stdout handler on the root logger.

    Application and uvicorn loggers drop their own handlers and propagate to
    root, so every record is formatted exactly once.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    if level is None:
        level = logging.INFO

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JSONExtraFormatter() if use_json else ConsoleExtraFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name in _APP_LOGGERS:
        app_logger = logging.getLogger(name)
        app_logger.setLevel(level)
        for existing in list(app_logger.handlers):
            app_logger.removeHandler(existing)
        app_logger.propagate = True

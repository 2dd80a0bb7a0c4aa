"""Structured JSON logging for the request layer.

Library modules only create loggers (`clients.*`, `foundation.*`). An
application embedding the layer calls `configure_logging()` once to route
those loggers through `CustomJSONFormatter` on stdout.

Context travels in `extra`. Two keys get special treatment:

- `request`: a dict whose `url`, `method` and `status_code` are lifted to the
  top level of the JSON line.
- `error`: a dict copied under `error`, with the formatted traceback added as
  `trace` when the record carries `exc_info`.

Every other extra key is emitted as-is; values that are not JSON
serializable are rendered with `str()`.
"""

import json
import logging
from logging.config import dictConfig
from typing import Any

# Namespaces owned by this package
LIBRARY_LOGGERS = ("clients", "foundation")
REQUEST_FIELDS = ("url", "method", "status_code")

# LogRecord attributes that are never copied as extras
_RESERVED_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "request", "error"}


class CustomJSONFormatter(logging.Formatter):
    """Render each log record as one JSON object per line."""

    def __init__(self, fmt: str) -> None:
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        # Populates record.message and record.asctime
        super().format(record)
        return json.dumps(self.get_log(record), default=str)

    def get_log(self, record: logging.LogRecord) -> dict[str, Any]:
        """Map a formatted record to the dict that is serialized."""
        log: dict[str, Any] = {
            "time": record.asctime,
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.message,
            "pathname": record.pathname,
            "line": record.lineno,
            "thread_name": record.threadName,
        }
        log.update(self._request_fields(record))
        error = self._error_field(record)
        if error is not None:
            log["error"] = error
        log.update(
            (key, value) for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        )
        return log

    @staticmethod
    def _request_fields(record: logging.LogRecord) -> dict[str, Any]:
        request = getattr(record, "request", None)
        if not isinstance(request, dict):
            return {}
        return {key: request[key] for key in REQUEST_FIELDS if request.get(key) is not None}

    def _error_field(self, record: logging.LogRecord) -> Any:
        error = getattr(record, "error", None)
        if not isinstance(error, dict):
            return error
        error = dict(error)
        if record.exc_info:
            error["trace"] = self.formatException(record.exc_info)
        return error


def build_logging_config(level: str | int = "INFO") -> dict[str, Any]:
    """Return a `dictConfig` mapping with the library loggers at `level`.

    `urllib3` is kept at WARNING so connection pool chatter stays out of the
    output.
    """
    handler = {"handlers": ["json_stdout"], "propagate": False}
    loggers: dict[str, Any] = {name: {**handler, "level": level} for name in LIBRARY_LOGGERS}
    loggers["urllib3"] = {**handler, "level": "WARNING"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": CustomJSONFormatter, "fmt": "%(asctime)s"},
        },
        "handlers": {
            "json_stdout": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": loggers,
        "root": {"handlers": ["json_stdout"], "level": "INFO"},
    }


LOGGING_CONFIG: dict[str, Any] = build_logging_config()


def configure_logging(level: str | int | None = None) -> None:
    """Route the library loggers through the JSON formatter.

    Args:
        level: Level for the `clients` and `foundation` loggers
            (e.g., "DEBUG"). None uses INFO.
    """
    dictConfig(LOGGING_CONFIG if level is None else build_logging_config(level))

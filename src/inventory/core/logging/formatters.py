# src/inventory/core/logging/formatters.py

"""
Formatters used by the dictConfig in builder.py.

  - JsonFormatter: one JSON object per line for log collectors. Carries
    service/env/version and the request id, plus any `extra={...}` fields.
  - ColorFormatter: compact ANSI-colored lines for a developer terminal.

Both expect `record.request_id`, which RequestIdFilter always sets.
"""

import json
import logging

from inventory.utils.logging import get_project_name, get_project_version

VERSION = get_project_version()

# LogRecord attributes that are not user extras
_RESERVED = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "request_id"}


def _jsonable(value):
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    `env` and `service` are stamped on every line; `service` defaults to the
    project name. Extras that do not serialize are written as str().
    """

    def __init__(self, *, env: str | None = None, service: str | None = None, datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service or get_project_name()

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": VERSION,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        extras = {
            key: _jsonable(value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED and key not in payload and not key.startswith("_")
        }
        payload.update(extras)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """TIMESTAMP | LEVEL | LOGGER | REQUEST_ID | MESSAGE, level colorized."""

    COLOR_CODES = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        level = f"{self.COLOR_CODES.get(record.levelname, '')}{record.levelname:<8}{self.RESET}"
        request_id = getattr(record, "request_id", "-")
        line = " | ".join(
            (self.formatTime(record, self.datefmt), level, record.name, request_id, record.getMessage())
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line

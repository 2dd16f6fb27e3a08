# src/inventory/core/logging/filters.py
"""
Logging filters.

The request id lives in a ContextVar so it follows a request across awaits.
RequestIdFilter copies it onto every LogRecord (or "-" outside a request),
which keeps `%(request_id)s` in format strings safe.
"""

import contextvars
import logging

_current_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)


def set_request_id(request_id: str | None) -> contextvars.Token:
    """Bind `request_id` to the current context; pass the token to reset_request_id()."""
    return _current_request_id.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _current_request_id.reset(token)


def get_request_id() -> str | None:
    return _current_request_id.get()


class RequestIdFilter(logging.Filter):
    """
    Sets `record.request_id`: an explicit `extra={"request_id": ...}` wins,
    then the context value, then "-". Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = getattr(record, "request_id", None) or get_request_id() or "-"
        return True


class RedactFilter(logging.Filter):
    """Masks record attributes (usually from `extra`) with a sensitive name."""

    SENSITIVE = frozenset({
        "password",
        "admin_password",
        "db_password",
        "secret",
        "token",
        "authorization",
        "cookie",
    })
    MASK = "***REDACTED***"

    def filter(self, record: logging.LogRecord) -> bool:
        hits = [name for name in vars(record) if name.lower() in self.SENSITIVE]
        for name in hits:
            setattr(record, name, self.MASK)
        return True

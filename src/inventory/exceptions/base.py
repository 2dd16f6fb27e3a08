"""
Error taxonomy shared by the repository, workflow and HTTP layers.

A store failure is classified exactly once (see `mapper.classify_error`) into a
`ClassifiedError`: a small immutable value carrying the error kind, a message
that is safe to show to users, the fields involved and the original cause.
Workflows pass it around as a value; only the outermost HTTP layer raises it
(wrapped in `InventoryError`) to reach the FastAPI exception handlers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class ErrorKind(str, Enum):
    """The closed set of error kinds the core may produce."""

    NOT_FOUND = "not_found"
    DUPLICATE_KEY = "duplicate"
    REFERENTIAL_CONSTRAINT = "referential_constraint"
    INVALID_INPUT = "invalid_input"
    INTERNAL = "internal"


# Map canonical error kind -> HTTP status.
ERROR_KIND_TO_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE_KEY: 409,
    ErrorKind.REFERENTIAL_CONSTRAINT: 409,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class ClassifiedError:
    """
    Tagged result of classifying a failure.

    - kind: one of ErrorKind
    - message: human-friendly message (safe to show to clients)
    - fields: field names related to the error (e.g. ('isbn',))
    - constraint: DB constraint name, for logs only
    - cause: the original exception, kept for logging even when the message is generic
    """

    kind: ErrorKind
    message: str
    fields: tuple[str, ...] = ()
    constraint: str | None = None
    cause: BaseException | None = field(default=None, compare=False, repr=False)

    @classmethod
    def not_found(cls, message: str = "Not found") -> "ClassifiedError":
        return cls(ErrorKind.NOT_FOUND, message)

    @property
    def http_status(self) -> int:
        return ERROR_KIND_TO_STATUS[self.kind]

    def user_message(self, *, production: bool) -> str:
        """
        Message to display. Internal errors hide their details in production;
        every other kind already carries a safe message.
        """
        if self.kind is ErrorKind.INTERNAL and production:
            return "Something went wrong. Please try again later."
        return self.message

    def to_payload(self) -> dict:
        """JSON-serializable summary: detail, code and fields (no constraint, no cause)."""
        payload = {"detail": self.message, "code": self.kind.value}
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def __str__(self) -> str:
        base = self.message
        parts = [f"kind: {self.kind.value}"]
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        return f"{base} ({'; '.join(parts)})"


class InventoryError(Exception):
    """
    Carries a ClassifiedError to the FastAPI exception handlers.

    Raised only by the HTTP layer for terminal outcomes (not found, internal
    failures on reads/deletes); it never re-classifies its payload.
    """

    def __init__(self, error: ClassifiedError):
        super().__init__(error.message)
        self.error = error

    @property
    def http_status(self) -> int:
        return self.error.http_status


class InvalidFieldError(Exception):
    """Raised when the caller passes unexpected/unknown fields to repository methods."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else []


__all__ = [
    "ErrorKind",
    "ERROR_KIND_TO_STATUS",
    "ClassifiedError",
    "InventoryError",
    "InvalidFieldError",
]

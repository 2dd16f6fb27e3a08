import re
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory.validators.model_validators import get_unique_column_sets
from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    ForeignKeyConstraintError,
    RestrictedDeleteError,
    MissingReferenceError,
    CheckConstraintError,
)
from .base import ClassifiedError, ErrorKind, InvalidFieldError

logger = logging.getLogger(__name__)

# User-facing names per model: (noun, noun with article)
MODEL_LABELS = {
    "Category": ("genre", "A genre"),
    "Book": ("book", "A book"),
}

FIELD_LABELS = {
    "isbn": "ISBN",
    "category_id": "genre",
}

# -----------------------
# Column extraction helpers
# -----------------------

def _extract_columns_postgres(msg: str) -> list[str] | None:
    """
    Try to extract involved column names from common Postgres messages:
      - 'null value in column "title" violates not-null constraint'
      - 'DETAIL:  Key (title, author, category_id)=(...) already exists.'
    """
    if not msg:
        return None

    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # SQLite: 'UNIQUE constraint failed: books.title, books.author, books.category_id'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols"))]
    return None


def _extract_key_name(msg: str) -> str | None:
    """
    Name of the violated constraint/index when the message carries one:
      - MySQL: "Duplicate entry 'x' for key 'books.uq_books_isbn'"
      - MySQL: "Column 'title' cannot be null"
      - SQLite: 'CHECK constraint failed: ck_books_price_non_negative'
    """
    m = re.search(r"for key '(?P<key>[^']+)'", msg, flags=re.IGNORECASE)
    if m:
        return m.group("key")
    m = re.search(r"Column '(?P<key>[^']+)' cannot be null", msg, flags=re.IGNORECASE)
    if m:
        return m.group("key")
    m = re.search(r"CHECK constraint (?:failed: |'?)(?P<key>[\w.]+)", msg, flags=re.IGNORECASE)
    if m:
        return m.group("key")
    return None


def columns_for_constraint(model, name: str | None) -> list[str] | None:
    """
    Resolve a constraint / index name to the model columns it covers.

    Handles naming-convention names (uq_books_isbn,
    uq_books_title_author_category_id, ck_books_price_non_negative), MySQL
    "table.key" names and MySQL's default index names (the first column).
    """
    if model is None or not name:
        return None

    key = name.split(".")[-1].strip("`'\"")
    best: tuple[str, ...] | None = None
    for cols in get_unique_column_sets(model):
        joined = "_".join(cols)
        if key == joined or key.endswith("_" + joined) or key == cols[0]:
            if best is None or len(cols) > len(best):
                best = cols
    if best:
        return list(best)

    # CHECK / NOT NULL: a column name appearing as a token of the key
    named = [
        col.name for col in model.__table__.columns
        if re.search(rf"(^|_){re.escape(col.name)}(_|$)", key)
    ]
    return named or None


def extract_columns_from_integrity(exc: IntegrityError, model=None, constraint_name: str | None = None) -> list[str] | None:
    """
    Best-effort extraction of column names from the DB message (Postgres, SQLite, MySQL).
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    cols = _extract_columns_postgres(msg)
    if cols:
        return cols

    cols = _extract_columns_sqlite(msg)
    if cols:
        return cols

    return columns_for_constraint(model, constraint_name or _extract_key_name(msg))


# -----------------------
# Messages
# -----------------------

def _labels(model) -> tuple[str, str]:
    name = getattr(model, "__name__", None) or "Record"
    return MODEL_LABELS.get(name, (name.lower(), f"A {name.lower()}"))


def _duplicate_message(model, columns: list[str] | None, values: Mapping[str, Any]) -> str:
    noun, article_noun = _labels(model)
    if not columns:
        return f"{article_noun} with the same details already exists."

    shown = [
        f"{FIELD_LABELS.get(c, c)} '{values[c]}'"
        for c in columns
        if c in values and c != "category_id"
    ]
    if not shown:
        return f"{article_noun} with the same {', '.join(FIELD_LABELS.get(c, c) for c in columns)} already exists."

    message = f"{article_noun} with {' and '.join(shown)} already exists"
    if "category_id" in columns:
        message += " in this genre"
    return message + "."


def _restricted_delete_message(model) -> str:
    noun, _ = _labels(model)
    if noun == "genre":
        return ("Cannot delete genre: books are still assigned to this genre. "
                "Reassign or delete those books first.")
    return f"Cannot delete {noun}: other records still reference it. Reassign or delete them first."


# -----------------------
# Classifier
# -----------------------

def classify_error(
    exc: BaseException,
    *,
    model=None,
    operation: str = "operate on",
    values: Mapping[str, Any] | None = None,
) -> ClassifiedError:
    """
    Map any failure raised below the workflow into the closed error taxonomy.

    Args:
        exc: the raised exception (kept as `cause` on the result)
        model: model class involved, used for labels and constraint lookup
        operation: "create" | "update" | "delete" | ...; disambiguates foreign key
                   failures when the driver does not say which side failed
        values: the cleaned values submitted, used to name duplicate values

    Returns:
        ClassifiedError. This function never raises.
    """
    values = values or {}
    noun, article_noun = _labels(model)
    model_name = getattr(model, "__name__", None)

    # Malformed arguments reaching the repository despite validation
    if isinstance(exc, InvalidFieldError):
        logger.info("mapper.invalid_fields", extra={"model": model_name, "fields": exc.fields})
        return ClassifiedError(ErrorKind.INVALID_INPUT, exc.message, fields=tuple(exc.fields), cause=exc)

    if isinstance(exc, IntegrityError):
        return _classify_integrity(exc, model, operation, values)

    # Value rejected by the driver (too long, out of range, bad type)
    if isinstance(exc, DataError):
        logger.info("mapper.data_error", extra={"model": model_name, "operation": operation})
        return ClassifiedError(ErrorKind.INVALID_INPUT, f"Invalid value for {noun}.", cause=exc)

    # Anything else is unclassified: connectivity, programming errors, ...
    logger.error(
        "mapper.internal_error",
        exc_info=exc,
        extra={"model": model_name, "operation": operation, "error_type": type(exc).__name__},
    )
    return ClassifiedError(
        ErrorKind.INTERNAL,
        f"Database error while trying to {operation} {noun}: {exc}",
        cause=exc,
    )


def _classify_integrity(exc: IntegrityError, model, operation: str, values: Mapping[str, Any]) -> ClassifiedError:
    exc_cls, constraint_name = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc, model, constraint_name)
    noun, article_noun = _labels(model)
    model_name = getattr(model, "__name__", None)
    fields = tuple(columns or ())

    # SQLite only says "FOREIGN KEY constraint failed": the operation decides the side.
    if exc_cls is ForeignKeyConstraintError:
        exc_cls = RestrictedDeleteError if operation == "delete" else MissingReferenceError

    # UNIQUE / Duplicate
    if exc_cls is UniqueConstraintError:
        # INFO: duplicates are expected client-level scenarios
        logger.info(
            "mapper.duplicate_detected",
            extra={"model": model_name, "fields": columns, "constraint": constraint_name},
        )
        return ClassifiedError(
            ErrorKind.DUPLICATE_KEY,
            _duplicate_message(model, columns, values),
            fields=fields,
            constraint=constraint_name,
            cause=exc,
        )

    if exc_cls is RestrictedDeleteError:
        logger.info(
            "mapper.referential_violation",
            extra={"model": model_name, "operation": operation, "constraint": constraint_name},
        )
        return ClassifiedError(
            ErrorKind.REFERENTIAL_CONSTRAINT,
            _restricted_delete_message(model),
            constraint=constraint_name,
            cause=exc,
        )

    if exc_cls is MissingReferenceError:
        logger.info(
            "mapper.missing_reference",
            extra={"model": model_name, "operation": operation, "constraint": constraint_name},
        )
        return ClassifiedError(
            ErrorKind.INVALID_INPUT,
            "The selected genre does not exist.",
            fields=("category_id",),
            constraint=constraint_name,
            cause=exc,
        )

    # NOT NULL / Missing required field
    if exc_cls is NotNullConstraintError:
        logger.info(
            "mapper.not_null_violation",
            extra={"model": model_name, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            message = f"Missing required field(s): {', '.join(columns)} for {noun}."
        else:
            message = f"Missing required field for {noun}."
        return ClassifiedError(ErrorKind.INVALID_INPUT, message, fields=fields, constraint=constraint_name, cause=exc)

    # CHECK
    if exc_cls is CheckConstraintError:
        # Keep the raw DB message at DEBUG level only
        logger.debug(
            "mapper.check_constraint_failure",
            extra={"model": model_name, "raw": str(exc.orig), "constraint": constraint_name},
        )
        if columns:
            message = f"{', '.join(columns).capitalize()} must not be negative."
        else:
            message = f"{noun.capitalize()} business rule violated."
        return ClassifiedError(ErrorKind.INVALID_INPUT, message, fields=fields, constraint=constraint_name, cause=exc)

    # Unknown/unclassified integrity error
    logger.warning(
        "mapper.unknown_integrity_error",
        extra={"model": model_name, "constraint": constraint_name},
    )
    logger.debug("mapper.unknown_integrity_raw", extra={"model": model_name, "raw": str(exc.orig)})
    return ClassifiedError(
        ErrorKind.INTERNAL,
        f"{noun.capitalize()} database integrity error: {exc.orig}",
        constraint=constraint_name,
        cause=exc,
    )


# -----------------------
# Async context manager to DRY error handling in workflows
# -----------------------

@dataclass
class Attempt:
    """Result channel of `db_error_handler`: either `result` or `error` is set."""

    result: Any = None
    error: ClassifiedError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@asynccontextmanager
async def db_error_handler(
    db: AsyncSession,
    model=None,
    operation: str = "operate on",
    values: Mapping[str, Any] | None = None,
):
    """
    Usage:
        async with db_error_handler(self.db, Book, "create", cleaned) as attempt:
            attempt.result = await repo.create(**cleaned)
            await self.db.commit()
        if not attempt.ok:
            ...  # attempt.error is a ClassifiedError

    On failure the session is rolled back and the exception is classified into
    `attempt.error` instead of propagating.
    """
    attempt = Attempt()
    try:
        yield attempt
    except Exception as exc:
        try:
            await db.rollback()
        except Exception:
            logger.exception("Failed to rollback session after store error", extra={"model": getattr(model, "__name__", None)})
        attempt.result = None
        attempt.error = classify_error(exc, model=model, operation=operation, values=values)

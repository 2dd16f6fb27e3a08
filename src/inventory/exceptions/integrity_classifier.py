r"""
Constraint-level classification of SQLAlchemy IntegrityErrors.

The classes below are tags: `classify_integrity_error()` returns one of them
(never raises it) together with the constraint name when the driver reports
one. `mapper.classify_error()` turns the tag into the public taxonomy:

| Tag                         | -> | ErrorKind                 |
| --------------------------- | -- | ------------------------- |
| `UniqueConstraintError`     | -> | DUPLICATE_KEY             |
| `RestrictedDeleteError`     | -> | REFERENTIAL_CONSTRAINT    |
| `MissingReferenceError`     | -> | INVALID_INPUT             |
| `NotNullConstraintError`    | -> | INVALID_INPUT             |
| `CheckConstraintError`      | -> | INVALID_INPUT             |
| `UnknownIntegrityError`     | -> | INTERNAL                  |

Detection order: Postgres SQLSTATE (+ diag), MySQL errno, message text
(SQLite and anything else).
"""
import logging
from typing import Type

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

Classification = tuple[Type["ConstraintViolation"], str | None]


class ConstraintViolation(Exception):
    """Base for integrity violation tags."""


class UniqueConstraintError(ConstraintViolation):
    """Duplicate value in a unique column set."""


class NotNullConstraintError(ConstraintViolation):
    pass


class ForeignKeyConstraintError(ConstraintViolation):
    """Foreign key violated, side unknown (SQLite gives no detail)."""


class RestrictedDeleteError(ForeignKeyConstraintError):
    """The parent row is still referenced."""


class MissingReferenceError(ForeignKeyConstraintError):
    """The child row points at a parent that does not exist."""


class CheckConstraintError(ConstraintViolation):
    pass


class UnknownIntegrityError(ConstraintViolation):
    pass


# SQLSTATE class 23, https://www.postgresql.org/docs/current/errcodes-appendix.html
SQLSTATE_TAGS: dict[str, Type[ConstraintViolation]] = {
    "23502": NotNullConstraintError,
    "23503": ForeignKeyConstraintError,
    "23505": UniqueConstraintError,
    "23514": CheckConstraintError,
}

# https://dev.mysql.com/doc/mysql-errors/8.0/en/server-error-reference.html
MYSQL_ERRNO_TAGS: dict[int, Type[ConstraintViolation]] = {
    1048: NotNullConstraintError,     # ER_BAD_NULL_ERROR
    1062: UniqueConstraintError,      # ER_DUP_ENTRY
    1216: MissingReferenceError,      # ER_NO_REFERENCED_ROW
    1217: RestrictedDeleteError,      # ER_ROW_IS_REFERENCED
    1364: NotNullConstraintError,     # ER_NO_DEFAULT_FOR_FIELD
    1451: RestrictedDeleteError,      # ER_ROW_IS_REFERENCED_2
    1452: MissingReferenceError,      # ER_NO_REFERENCED_ROW_2
    1586: UniqueConstraintError,      # ER_DUP_ENTRY_WITH_KEY_NAME
    3819: CheckConstraintError,       # ER_CHECK_CONSTRAINT_VIOLATED
}

PARENT_SIDE_PHRASES = ("still referenced", "update or delete on table", "cannot delete or update a parent row")
CHILD_SIDE_PHRASES = ("is not present in table", "insert or update on table", "cannot add or update a child row")

# Checked in order; the first tag whose phrases appear in the message wins
MESSAGE_RULES: tuple[tuple[Type[ConstraintViolation], tuple[str, ...]], ...] = (
    (UniqueConstraintError, ("unique constraint", "unique failed", "unique violation", "duplicate")),
    (NotNullConstraintError, ("not null", "null value in column")),
    (ForeignKeyConstraintError, ("foreign key", "is not present in table")),
    (CheckConstraintError, ("check constraint", "check failed")),
)


def _mentions(text: str, phrases: tuple[str, ...]) -> bool:
    return any(phrase in text for phrase in phrases)


def _foreign_key_side(message: str) -> Type[ForeignKeyConstraintError]:
    text = message.lower()
    if _mentions(text, PARENT_SIDE_PHRASES):
        return RestrictedDeleteError
    if _mentions(text, CHILD_SIDE_PHRASES):
        return MissingReferenceError
    return ForeignKeyConstraintError


def _by_sqlstate(orig) -> Classification | None:
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if not sqlstate:
        return None

    constraint = getattr(getattr(orig, "diag", None), "constraint_name", None)
    tag = SQLSTATE_TAGS.get(sqlstate)
    if tag is None:
        logger.warning("integrity.unknown_sqlstate", extra={"sqlstate": sqlstate, "constraint": constraint})
        return UnknownIntegrityError, constraint

    if tag is ForeignKeyConstraintError:
        tag = _foreign_key_side(str(orig))
    logger.debug("integrity.postgres", extra={"sqlstate": sqlstate, "constraint": constraint})
    return tag, constraint


def _by_mysql_errno(orig) -> Classification | None:
    args = getattr(orig, "args", ()) or ()
    if not args or not isinstance(args[0], int):
        return None

    errno = args[0]
    tag = MYSQL_ERRNO_TAGS.get(errno)
    if tag is None:
        logger.warning("integrity.unknown_errno", extra={"errno": errno})
        return UnknownIntegrityError, None
    logger.debug("integrity.mysql", extra={"errno": errno})
    return tag, None


def _by_message(message: str) -> Classification:
    text = message.lower()
    for tag, phrases in MESSAGE_RULES:
        if _mentions(text, phrases):
            if tag is ForeignKeyConstraintError:
                return _foreign_key_side(message), None
            return tag, None

    logger.warning("integrity.unknown_message", extra={"message_snippet": message[:200]})
    return UnknownIntegrityError, None


def classify_integrity_error(exc: IntegrityError) -> Classification:
    """
    Tag an IntegrityError with the kind of constraint that failed.

    Returns `(tag class, constraint name or None)`.
    """
    orig = exc.orig
    found = _by_sqlstate(orig) or _by_mysql_errno(orig)
    if found is not None:
        return found
    return _by_message(str(orig) if orig is not None else str(exc))

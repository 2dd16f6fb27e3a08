from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from inventory.exceptions.integrity_classifier import (
    CheckConstraintError,
    ForeignKeyConstraintError,
    MissingReferenceError,
    NotNullConstraintError,
    RestrictedDeleteError,
    UniqueConstraintError,
    UnknownIntegrityError,
    classify_integrity_error,
)


class FakePostgresError(Exception):
    """Shape of a psycopg error: pgcode/sqlstate plus diag.constraint_name."""

    def __init__(self, message: str, pgcode: str, constraint_name: str | None = None):
        super().__init__(message)
        self.pgcode = pgcode
        self.sqlstate = pgcode
        self.diag = SimpleNamespace(constraint_name=constraint_name)


def integrity(orig: BaseException) -> IntegrityError:
    return IntegrityError("INSERT INTO books ...", {}, orig)


class TestPostgresClassification:

    def test_unique_violation_with_constraint_name(self):
        orig = FakePostgresError(
            'duplicate key value violates unique constraint "uq_books_isbn"', "23505", "uq_books_isbn"
        )

        assert classify_integrity_error(integrity(orig)) == (UniqueConstraintError, "uq_books_isbn")

    def test_foreign_key_on_delete_is_restricted_delete(self):
        orig = FakePostgresError(
            'update or delete on table "categories" violates foreign key constraint '
            '"fk_books_category_id_categories" on table "books"',
            "23503",
            "fk_books_category_id_categories",
        )

        cls, name = classify_integrity_error(integrity(orig))

        assert cls is RestrictedDeleteError
        assert name == "fk_books_category_id_categories"

    def test_foreign_key_on_insert_is_missing_reference(self):
        orig = FakePostgresError(
            'insert or update on table "books" violates foreign key constraint "fk_books_category_id_categories"',
            "23503",
        )

        assert classify_integrity_error(integrity(orig))[0] is MissingReferenceError

    def test_not_null_and_check(self):
        not_null = FakePostgresError('null value in column "title" violates not-null constraint', "23502")
        check = FakePostgresError("violates check constraint", "23514", "ck_books_price_non_negative")

        assert classify_integrity_error(integrity(not_null))[0] is NotNullConstraintError
        assert classify_integrity_error(integrity(check)) == (CheckConstraintError, "ck_books_price_non_negative")

    def test_unknown_pgcode(self):
        orig = FakePostgresError("conflicting key value violates exclusion constraint", "23P01")

        assert classify_integrity_error(integrity(orig))[0] is UnknownIntegrityError


class TestMySQLClassification:

    @pytest.mark.parametrize(
        "errno, expected",
        [
            (1062, UniqueConstraintError),
            (1451, RestrictedDeleteError),
            (1452, MissingReferenceError),
            (1048, NotNullConstraintError),
            (3819, CheckConstraintError),
            (1999, UnknownIntegrityError),
        ],
    )
    def test_errno_mapping(self, errno, expected):
        orig = Exception(errno, "some message")

        assert classify_integrity_error(integrity(orig))[0] is expected


class TestGenericMessageClassification:

    @pytest.mark.parametrize(
        "message, expected",
        [
            ("UNIQUE constraint failed: books.isbn", UniqueConstraintError),
            ("NOT NULL constraint failed: books.title", NotNullConstraintError),
            ("CHECK constraint failed: ck_books_stock_non_negative", CheckConstraintError),
            ("FOREIGN KEY constraint failed", ForeignKeyConstraintError),
            ("something nobody expected", UnknownIntegrityError),
        ],
    )
    def test_sqlite_messages(self, message, expected):
        assert classify_integrity_error(integrity(Exception(message)))[0] is expected

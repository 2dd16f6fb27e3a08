from decimal import Decimal

import pytest

from inventory.validators.form_validators import (
    FieldError,
    validate_book,
    validate_category,
)


def valid_book_form(**overrides) -> dict:
    form = {
        "title": "Valid Title 1",
        "author": "Jane O'Neil",
        "isbn": "978-0743273565",
        "description": "",
        "price": "12.99",
        "stock": "5",
        "category_id": "1",
    }
    form.update(overrides)
    return form


class TestValidateBook:

    def test_valid_form_has_no_errors_and_cleans_types(self):
        """
        Behavior:
                - The canonical valid submission ("Valid Title 1", category_id "1").

        Importance:
                - No errors, and the cleaned values are typed (Decimal, int) and trimmed.
        """
        result = validate_book(valid_book_form(title="  Valid Title 1  "))

        assert result.is_valid
        assert result.errors == []
        assert result.cleaned == {
            "title": "Valid Title 1",
            "author": "Jane O'Neil",
            "isbn": "978-0743273565",
            "description": None,
            "price": Decimal("12.99"),
            "stock": 5,
            "category_id": 1,
        }

    def test_empty_title_gives_exactly_one_title_error(self):
        """
        Behavior:
                - Empty title, everything else valid.

        Importance:
                - Within a field only the first failing rule reports, so the user sees
                  "Title is required." once, not a length error as well.
        """
        result = validate_book(valid_book_form(title=""))

        assert not result.is_valid
        assert result.errors == [FieldError("title", "Title is required.")]
        assert "title" not in result.cleaned

    def test_whitespace_only_title_is_empty(self):
        result = validate_book(valid_book_form(title="   "))

        assert result.errors_for("title") == ["Title is required."]

    def test_every_invalid_field_is_reported(self):
        """One bad field never hides another: all fields are checked."""
        result = validate_book(
            valid_book_form(title="Bad <script>", author="R2D2", isbn="123", price="-1", stock="1.5", category_id="")
        )

        assert {e.field for e in result.errors} == {"title", "author", "isbn", "price", "stock", "category_id"}
        assert result.errors_for("title") == ["Title contains invalid characters."]
        assert result.errors_for("author") == ["Author must only contain letters."]
        assert result.errors_for("isbn") == ["ISBN must be between 10 and 20 characters."]
        assert result.errors_for("price") == ["Price must be a positive number."]
        assert result.errors_for("stock") == ["Stock must be a non-negative integer."]
        assert result.errors_for("category_id") == ["Genre is required."]

    @pytest.mark.parametrize(
        "isbn, message",
        [
            ("", "ISBN is required."),
            ("978-07432735651234567", "ISBN must be between 10 and 20 characters."),
            ("978-074327356a", "ISBN must only contain numbers, hyphens, and X."),
        ],
    )
    def test_isbn_rules(self, isbn, message):
        assert validate_book(valid_book_form(isbn=isbn)).errors_for("isbn") == [message]

    def test_isbn_with_check_digit_x_is_valid(self):
        assert validate_book(valid_book_form(isbn="0-306-40615-X")).is_valid

    @pytest.mark.parametrize("price", ["abc", "NaN", "Infinity", "-0.01"])
    def test_price_must_be_finite_non_negative_number(self, price):
        assert validate_book(valid_book_form(price=price)).errors_for("price") == ["Price must be a positive number."]

    def test_price_zero_is_allowed(self):
        result = validate_book(valid_book_form(price="0"))

        assert result.is_valid
        assert result.cleaned["price"] == Decimal("0")

    def test_missing_price(self):
        assert validate_book(valid_book_form(price="")).errors_for("price") == ["Price is required."]

    @pytest.mark.parametrize("price", ["1.999", "100000000", "1_000", "1e3", ".5"])
    def test_price_must_fit_the_column(self, price):
        assert validate_book(valid_book_form(price=price)).errors_for("price") == [
            "Price must be below 100000000 with at most 2 decimal places."
        ]

    def test_largest_price_is_kept_exactly(self):
        result = validate_book(valid_book_form(price="99999999.99"))

        assert result.is_valid
        assert result.cleaned["price"] == Decimal("99999999.99")

    def test_stock_above_integer_column_limit(self):
        result = validate_book(valid_book_form(stock="2147483648"))

        assert result.errors_for("stock") == ["Stock must not exceed 2147483647."]
        assert validate_book(valid_book_form(stock="2147483647")).cleaned["stock"] == 2147483647

    def test_category_id_above_integer_column_limit(self):
        result = validate_book(valid_book_form(category_id="9" * 20))

        assert result.errors_for("category_id") == ["Please select a valid genre."]

    def test_empty_stock_defaults_to_zero(self):
        result = validate_book(valid_book_form(stock=""))

        assert result.is_valid
        assert result.cleaned["stock"] == 0

    @pytest.mark.parametrize("category_id", ["0", "-3", "fiction"])
    def test_category_id_must_be_positive_integer(self, category_id):
        assert validate_book(valid_book_form(category_id=category_id)).errors_for("category_id") == [
            "Please select a valid genre."
        ]

    def test_description_too_long(self):
        result = validate_book(valid_book_form(description="x" * 1001))

        assert result.errors_for("description") == ["Description must not exceed 1000 characters."]

    def test_missing_keys_are_treated_as_empty(self):
        result = validate_book({})

        assert {e.field for e in result.errors} == {"title", "author", "isbn", "price", "category_id"}

    def test_unknown_keys_are_ignored(self):
        result = validate_book(valid_book_form(adminPassword="secret", extra="1"))

        assert result.is_valid
        assert "adminPassword" not in result.cleaned

    def test_field_error_dict_shape(self):
        assert FieldError("title", "Title is required.").to_dict() == {"field": "title", "msg": "Title is required."}


class TestValidateCategory:

    def test_valid_category(self):
        result = validate_category({"name": " Self-Help ", "description": " Better habits "})

        assert result.is_valid
        assert result.cleaned == {"name": "Self-Help", "description": "Better habits"}

    def test_empty_name(self):
        result = validate_category({"name": "", "description": ""})

        assert result.errors == [FieldError("name", "Genre name is required.")]

    def test_name_with_digits_is_rejected(self):
        result = validate_category({"name": "Top 10"})

        assert result.errors_for("name") == ["Genre name must only contain letters and spaces."]

    def test_name_too_long(self):
        result = validate_category({"name": "a" * 256})

        assert result.errors_for("name") == ["Genre name must be between 1 and 255 characters."]

    def test_empty_description_cleans_to_none(self):
        assert validate_category({"name": "Poetry", "description": "  "}).cleaned["description"] is None

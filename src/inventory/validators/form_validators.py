"""
Form validation for books and categories.

Each resource has an ordered tuple of `FieldRules`; each field holds an ordered
tuple of `(predicate, message)` pairs. `validate()` is a pure function:

    raw form mapping -> ValidationResult(cleaned, errors)

Every field is checked, so one bad field never hides problems in another.
Inside a single field the first failing rule wins (one message per field).
Optional fields are skipped when empty and clean to their default. Cleaned
values are trimmed / coerced (str, Decimal, int); raw input is never copied
through.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping

Predicate = Callable[[str], bool]
Rule = tuple[Predicate, str]

_INT_RE = re.compile(r"[+-]?\d+")

# Column limits: INTEGER is 32-bit signed, price is NUMERIC(10, 2)
INT_MAX = 2_147_483_647
PRICE_PATTERN = r"\d{1,8}(\.\d{1,2})?"


# -----------------------
# Predicate factories
# -----------------------

def not_empty(value: str) -> bool:
    return value != ""


def length(min_len: int = 0, max_len: int | None = None) -> Predicate:
    def _check(value: str) -> bool:
        return len(value) >= min_len and (max_len is None or len(value) <= max_len)
    return _check


def matches(pattern: str) -> Predicate:
    compiled = re.compile(pattern)
    return lambda value: compiled.fullmatch(value) is not None


def is_number(min_value: Decimal | int | None = None) -> Predicate:
    def _check(value: str) -> bool:
        try:
            number = Decimal(value)
        except InvalidOperation:
            return False
        if not number.is_finite():
            return False
        return min_value is None or number >= min_value
    return _check


def is_int(min_value: int | None = None, max_value: int | None = None) -> Predicate:
    def _check(value: str) -> bool:
        if not _INT_RE.fullmatch(value):
            return False
        number = int(value)
        return (min_value is None or number >= min_value) and (max_value is None or number <= max_value)
    return _check


# -----------------------
# Result types
# -----------------------

@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "msg": self.message}


@dataclass
class ValidationResult:
    cleaned: dict[str, Any] = field(default_factory=dict)
    errors: list[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def errors_for(self, name: str) -> list[str]:
        return [e.message for e in self.errors if e.field == name]


@dataclass(frozen=True)
class FieldRules:
    name: str
    rules: tuple[Rule, ...]
    clean: Callable[[str], Any] = str
    optional: bool = False
    default: Any = None


# -----------------------
# Rule tables
# -----------------------

DESCRIPTION_RULES = FieldRules(
    "description",
    ((length(max_len=1000), "Description must not exceed 1000 characters."),),
    optional=True,
)

BOOK_RULES: tuple[FieldRules, ...] = (
    FieldRules("title", (
        (not_empty, "Title is required."),
        (length(1, 255), "Title must be between 1 and 255 characters."),
        (matches(r"[A-Za-z0-9\s\-',.!:&]+"), "Title contains invalid characters."),
    )),
    FieldRules("author", (
        (not_empty, "Author is required."),
        (length(1, 255), "Author must be between 1 and 255 characters."),
        (matches(r"[A-Za-z\s\-'.]+"), "Author must only contain letters."),
    )),
    FieldRules("isbn", (
        (not_empty, "ISBN is required."),
        (length(10, 20), "ISBN must be between 10 and 20 characters."),
        (matches(r"[0-9\-X]+"), "ISBN must only contain numbers, hyphens, and X."),
    )),
    DESCRIPTION_RULES,
    FieldRules("price", (
        (not_empty, "Price is required."),
        (is_number(min_value=0), "Price must be a positive number."),
        (matches(PRICE_PATTERN), "Price must be below 100000000 with at most 2 decimal places."),
    ), clean=Decimal),
    FieldRules("stock", (
        (is_int(min_value=0), "Stock must be a non-negative integer."),
        (is_int(max_value=INT_MAX), f"Stock must not exceed {INT_MAX}."),
    ), clean=int, optional=True, default=0),
    FieldRules("category_id", (
        (not_empty, "Genre is required."),
        (is_int(min_value=1, max_value=INT_MAX), "Please select a valid genre."),
    ), clean=int),
)

CATEGORY_RULES: tuple[FieldRules, ...] = (
    FieldRules("name", (
        (not_empty, "Genre name is required."),
        (length(1, 255), "Genre name must be between 1 and 255 characters."),
        (matches(r"[A-Za-z\s\-]+"), "Genre name must only contain letters and spaces."),
    )),
    DESCRIPTION_RULES,
)


# -----------------------
# Entry points
# -----------------------

def _raw_text(raw: Mapping[str, Any], name: str) -> str:
    value = raw.get(name)
    if value is None:
        return ""
    return str(value).strip()


def validate(raw: Mapping[str, Any], field_rules: tuple[FieldRules, ...]) -> ValidationResult:
    result = ValidationResult()
    for field_rule in field_rules:
        value = _raw_text(raw, field_rule.name)

        if field_rule.optional and value == "":
            result.cleaned[field_rule.name] = field_rule.default
            continue

        failed = next((message for predicate, message in field_rule.rules if not predicate(value)), None)
        if failed is not None:
            result.errors.append(FieldError(field_rule.name, failed))
        else:
            result.cleaned[field_rule.name] = field_rule.clean(value)
    return result


def validate_book(raw: Mapping[str, Any]) -> ValidationResult:
    return validate(raw, BOOK_RULES)


def validate_category(raw: Mapping[str, Any]) -> ValidationResult:
    return validate(raw, CATEGORY_RULES)

from .form_validators import (
    FieldError,
    ValidationResult,
    validate_book,
    validate_category,
)

__all__ = [
    "FieldError",
    "ValidationResult",
    "validate_book",
    "validate_category",
]

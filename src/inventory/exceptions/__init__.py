# inventory/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # Error taxonomy (ErrorKind, ClassifiedError, InventoryError)
# │   ├── integrity_classifier.py    # SQL-level / DB-specific constraint classification
# │   └── mapper.py                  # Map store failures to the taxonomy (+ db_error_handler)

from .base import ErrorKind, ClassifiedError, InventoryError, InvalidFieldError
from .mapper import classify_error, db_error_handler, Attempt

__all__ = [
    "ErrorKind",
    "ClassifiedError",
    "InventoryError",
    "InvalidFieldError",
    "classify_error",
    "db_error_handler",
    "Attempt",
]

"""
Centralized access to the database models.

Importing from here also registers every table on `Base.metadata`, which is
what `metadata.create_all()` (seeding script, tests) relies on.

    from inventory.models import Book, Category
"""

from .category import Category
from .book import Book

__all__ = [
    "Category",
    "Book",
]

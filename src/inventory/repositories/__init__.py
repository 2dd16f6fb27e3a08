"""
Repository layer.

Usage:
    from inventory.repositories import BookRepository, CategoryRepository
"""

from .base_repository import BaseRepository
from .category_repository import CategoryRepository
from .book_repository import BookRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "BookRepository",
]

"""
Book repository: CRUD for books plus the per-category listing.

`Book.category` is eagerly loaded with a LEFT OUTER JOIN, so every book read
here carries `category_name` without an extra query.
"""

from sqlalchemy.ext.asyncio import AsyncSession
import logging

from inventory.models.book import Book
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookRepository(BaseRepository[Book]):
    """
    Repository for Book entity operations.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Book, db)

    async def list_by_category(self, category_id: int) -> list[Book]:
        """
        Books of one category ordered by title.

        Args:
            category_id: id of the category

        Returns:
            List of books (empty when the category has none or does not exist)
        """
        query = (
            self._select()
            .where(Book.category_id == category_id)
            .order_by(Book.title)
        )
        result = await self.db.execute(query)
        books = list(result.scalars().unique().all())

        logger.debug(
            "repo.list_by_category.success",
            extra={"model": "Book", "category_id": category_id, "count": len(books)},
        )
        return books

"""
Category repository: CRUD for genres.

Everything comes from `BaseRepository`; deleting a category that still has
books raises the store's IntegrityError (ON DELETE RESTRICT), which the
workflow classifies as a referential constraint violation.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from inventory.models.category import Category
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CategoryRepository(BaseRepository[Category]):
    """
    Repository for Category entity operations.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Category, db)

    async def list_names(self) -> list[tuple[int, str]]:
        """
        (id, name) pairs ordered by name, for the genre select of the book form.
        """
        result = await self.db.execute(select(Category.id, Category.name).order_by(Category.name))
        names = [(row.id, row.name) for row in result]
        logger.debug("repo.list_names.success", extra={"model": "Category", "count": len(names)})
        return names

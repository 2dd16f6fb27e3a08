from .book import router as book_router
from .category import router as category_router

__all__ = ["book_router", "category_router"]

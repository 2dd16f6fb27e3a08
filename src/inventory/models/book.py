from decimal import Decimal
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from inventory.database.base import Base
from typing import TYPE_CHECKING

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .category import Category


class Book(Base):
    """
    SQLAlchemy model for Book.

    Constraint names come from the metadata naming convention:
      - uq_books_isbn
      - uq_books_title_author_category_id
      - ck_books_price_non_negative / ck_books_stock_non_negative
      - fk_books_category_id_categories (ON DELETE RESTRICT)
    """
    __tablename__ = "books"
    __table_args__ = (
        UniqueConstraint("title", "author", "category_id"),
        CheckConstraint("price >= 0", name="price_non_negative"),
        CheckConstraint("stock >= 0", name="stock_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    author: Mapped[str] = mapped_column(String(255), nullable=False)

    isbn: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # --- Relationships ---

    # Many-to-One, loaded with a LEFT OUTER JOIN so every read carries the genre
    # name. No back-reference on Category: deletes go through plain DELETE
    # statements and the store enforces RESTRICT.
    category: Mapped["Category | None"] = relationship("Category", lazy="joined")

    @property
    def category_name(self) -> str | None:
        """Denormalized name of the referenced category (None if the join found nothing)."""
        return self.category.name if self.category is not None else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "description": self.description,
            "price": self.price,
            "stock": self.stock,
            "category_id": self.category_id,
            "category_name": self.category_name,
        }

    def __repr__(self) -> str:
        return f"<Book(id={self.id!r}, title={self.title!r}, isbn={self.isbn!r})>"

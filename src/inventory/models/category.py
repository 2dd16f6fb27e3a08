from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from inventory.database.base import Base


class Category(Base):
    """
    SQLAlchemy model for Category (shown as "Genre" in the UI).

    Books reference categories through `books.category_id`; the foreign key is
    declared ON DELETE RESTRICT on the Book side, so a category with books
    cannot be deleted.
    """
    __tablename__ = "categories"

    # Surrogate key, assigned by the store
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Genre name (must be unique and non-null) -> constraint uq_categories_name
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Category(id={self.id!r}, name={self.name!r})>"

"""
Create the schema and seed starter data.

    python -m inventory.database.init_db

Safe to re-run: categories are matched by name and books by ISBN or by
(title, author, genre), and existing rows are left alone. All inserts share
one transaction; any failure rolls the whole seed back.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import or_, select, and_
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from inventory.config.settings import Settings, get_settings
from inventory.core.logging import setup_logging
from inventory.database.base import Base
from inventory.database.session import create_engine_from_settings, create_session_maker
from inventory.models import Book, Category

logger = logging.getLogger(__name__)

CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Fiction", "Fictional stories and novels"),
    ("Science", "Science and technology books"),
    ("History", "Historical books and biographies"),
    ("Self-Help", "Personal development and self-improvement"),
    ("Programming", "Software development and coding books"),
)

# title, author, isbn, description, price, stock, genre name
BOOKS: tuple[tuple[str, str, str, str, str, int, str], ...] = (
    ("The Great Gatsby", "F. Scott Fitzgerald", "978-0743273565", "A classic American novel set in the Jazz Age", "12.99", 15, "Fiction"),
    ("To Kill a Mockingbird", "Harper Lee", "978-0061120084", "A gripping tale of racial injustice and childhood innocence", "14.99", 20, "Fiction"),
    ("1984", "George Orwell", "978-0451524935", "A dystopian social science fiction novel", "13.99", 25, "Fiction"),
    ("A Brief History of Time", "Stephen Hawking", "978-0553380163", "A landmark volume in science writing", "18.99", 10, "Science"),
    ("Cosmos", "Carl Sagan", "978-0345331359", "A journey through space and time", "16.99", 12, "Science"),
    ("Sapiens", "Yuval Noah Harari", "978-0062316110", "A brief history of humankind", "19.99", 30, "History"),
    ("The Diary of a Young Girl", "Anne Frank", "978-0553296983", "The writings of a young Jewish girl during the Holocaust", "11.99", 18, "History"),
    ("Atomic Habits", "James Clear", "978-0735211292", "An easy and proven way to build good habits", "16.99", 40, "Self-Help"),
    ("The 7 Habits of Highly Effective People", "Stephen Covey", "978-1982137274", "Powerful lessons in personal change", "17.99", 35, "Self-Help"),
    ("Clean Code", "Robert C. Martin", "978-0132350884", "A handbook of agile software craftsmanship", "42.99", 22, "Programming"),
    ("The Pragmatic Programmer", "Andrew Hunt", "978-0135957059", "Your journey to mastery", "45.99", 18, "Programming"),
    ("JavaScript: The Good Parts", "Douglas Crockford", "978-0596517748", "Unearthing the excellence in JavaScript", "29.99", 25, "Programming"),
)


@dataclass(frozen=True)
class SeedReport:
    categories_added: int
    books_added: int


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed(session: AsyncSession) -> SeedReport:
    """
    Insert missing categories and books. The caller owns the transaction.

    Raises LookupError if a book's genre cannot be resolved to an id.
    """
    names = [name for name, _ in CATEGORIES]
    existing = set((await session.scalars(select(Category.name).where(Category.name.in_(names)))).all())

    new_categories = [
        Category(name=name, description=description)
        for name, description in CATEGORIES
        if name not in existing
    ]
    session.add_all(new_categories)
    await session.flush()

    rows = await session.execute(select(Category.id, Category.name).where(Category.name.in_(names)))
    id_by_name = {row.name: row.id for row in rows}

    books_added = 0
    for title, author, isbn, description, price, stock, genre in BOOKS:
        category_id = id_by_name.get(genre)
        if category_id is None:
            raise LookupError(f"Genre {genre!r} could not be resolved to an id")

        duplicate = await session.scalar(
            select(Book.id).where(
                or_(
                    Book.isbn == isbn,
                    and_(Book.title == title, Book.author == author, Book.category_id == category_id),
                )
            ).limit(1)
        )
        if duplicate is not None:
            continue

        session.add(
            Book(
                title=title,
                author=author,
                isbn=isbn,
                description=description,
                price=Decimal(price),
                stock=stock,
                category_id=category_id,
            )
        )
        books_added += 1

    await session.flush()
    return SeedReport(categories_added=len(new_categories), books_added=books_added)


async def init_db(engine: AsyncEngine) -> SeedReport:
    await create_schema(engine)
    logger.info("db.init.tables_created")

    session_maker = create_session_maker(engine)
    async with session_maker() as session:
        async with session.begin():
            report = await seed(session)

    logger.info(
        "db.init.seeded",
        extra={"categories_added": report.categories_added, "books_added": report.books_added},
    )
    return report


async def main(settings: Settings | None = None) -> SeedReport:
    settings = settings or get_settings()
    engine = create_engine_from_settings(settings)
    try:
        return await init_db(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    _settings = get_settings()
    setup_logging(_settings)
    try:
        asyncio.run(main(_settings))
    except Exception:
        logger.exception("db.init.failed")
        raise SystemExit(1)

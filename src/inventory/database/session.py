from typing import AsyncGenerator
import logging

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)

from inventory.config.settings import Settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless the pragma is on for each connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the AsyncEngine for the configured store.

    Pool sizing:
      - pool_size=DB_POOL_SIZE and max_overflow=0 cap concurrent connections.
      - pool_timeout=DB_POOL_TIMEOUT (None by default): checkouts beyond the cap
        wait in the pool's queue instead of failing fast.
      - pool_pre_ping=True checks connection health before handing it out.

    SQLite URLs (local runs, tests) keep SQLAlchemy's default pool and get the
    foreign key pragma so ON DELETE RESTRICT is enforced.
    """
    url = make_url(settings.DATABASE_URL)
    options = {
        "echo": settings.SQLALCHEMY_ECHO,   # Set to False in production
        "pool_pre_ping": True,
    }
    is_sqlite = url.get_backend_name() == "sqlite"
    if not is_sqlite:
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=0,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )

    engine = create_async_engine(url, **options)

    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.debug(
        "db.engine.created",
        extra={"backend": url.get_backend_name(), "pool_size": None if is_sqlite else settings.DB_POOL_SIZE},
    )
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # `async_sessionmaker` returns an async session factory.
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# Dependency to get DB session
async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. Yields a session and ensures it's closed after the request.

    The session factory lives on `app.state` (created by the app factory), so
    every request gets its own session and nothing is shared between requests.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_async_session)):
            await db.execute(...)
    """
    maker: async_sessionmaker[AsyncSession] = request.app.state.session_maker
    async with maker() as session:
        yield session

"""
Core pytest configuration for the entire test suite.

Only the shared database/app setup lives here. Domain fixtures (repositories,
sample rows) are in tests/test_fixtures/ and re-exported at the bottom of this
module so every test can use them without imports.

Every test gets its own SQLite file under `tmp_path` (foreign keys on), so
tests that commit, or that open several sessions at once, stay isolated.
"""

from __future__ import annotations

# -------------------------------
# Standard library imports
# -------------------------------
import logging
from pathlib import Path
from typing import AsyncGenerator, Iterator
from urllib.parse import urlparse

# -------------------------------
# Early logging tuning (IMPORTANT)
# -------------------------------
# Keep this block above the inventory.* imports so model registration and
# engine creation during collection stay quiet.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
    "multipart",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from pytest import FixtureRequest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from inventory.config.settings import Settings
from inventory.core.logging.builder import setup_logging
from inventory.database.base import Base
from inventory.database.session import create_engine_from_settings, create_session_maker
from inventory.main import create_app
from inventory import models  # noqa: F401 – import to register models with Base.metadata

logger = logging.getLogger(__name__)


def make_test_settings(db_path: Path, **overrides) -> Settings:
    """
    Settings for tests: never read from the developer's environment or .env.
    """
    values = {
        "ENV": "testing",
        "DB_URL": f"sqlite+aiosqlite:///{db_path}",
        "LOG_LEVEL": "WARNING",
        "LOG_FORMAT": "text",
        "LOG_TO_STDOUT": True,
        "ADMIN_PASSWORD": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def safe_log_db_url(db_url: str) -> str:
    """Database URL without credentials, for log lines."""
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


# The `autouse=True` part means that this fixture will be automatically used by pytest
# without explicitly including it in your test function parameters.
@pytest.fixture(scope="session", autouse=True)
def configure_logging(request: FixtureRequest, tmp_path_factory):
    """
    Install the application's dictConfig logging once for the session and put
    pytest's capture handler back on the root logger (dictConfig removes it).
    """
    setup_logging(make_test_settings(tmp_path_factory.mktemp("logging") / "unused.db"))

    caplog_plugin = request.config.pluginmanager.getplugin("logging-plugin")
    handler = getattr(caplog_plugin, "caplog_handler", None)
    if handler is not None:
        logging.getLogger().addHandler(handler)

    yield


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------

@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "inventory_test.db"


@pytest.fixture
def test_settings(db_path: Path) -> Settings:
    return make_test_settings(db_path)


@pytest.fixture
async def async_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """
    Engine built exactly like the app builds it (foreign key pragma included),
    with the schema created.
    """
    engine = create_engine_from_settings(test_settings)
    logger.debug("Using test DB: %s", safe_log_db_url(test_settings.DATABASE_URL))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(async_engine)


@pytest.fixture
async def db_session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """
    A plain session on the per-test database. Code under test may commit; the
    whole file is thrown away after the test.
    """
    async with session_maker() as session:
        yield session


@pytest.fixture
async def other_session(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """A second, independent session (another 'request') on the same database."""
    async with session_maker() as session:
        yield session


# ------------------------------------------------------------------------------------------------
# HTTP FIXTURES
# ------------------------------------------------------------------------------------------------

@pytest.fixture
def schema(db_path: Path) -> Path:
    """
    Create the schema synchronously (stdlib sqlite3 driver) for HTTP tests, which
    run the app in TestClient's own event loop.
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return db_path


@pytest.fixture
def app_factory(schema: Path):
    def _make(**overrides):
        return create_app(make_test_settings(schema, **overrides))
    return _make


@pytest.fixture
def client(app_factory) -> Iterator[TestClient]:
    with TestClient(app_factory(), follow_redirects=False) as test_client:
        yield test_client


# Repository test fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    category_repository,
    book_repository,
    sample_category_data,
    sample_book_data,
    create_category,
    create_book,
    created_category,
    created_book,
)

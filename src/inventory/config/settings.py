from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase, blank_to_none

class Settings(BaseSettings):
    """
    Application settings loaded from environment (and an optional `.env` file).

    Every value has a default so the app (and the test-suite) can start without
    any environment; production deployments override them through env vars.
    """

    # Environment (controls error verbosity and the default log format only)
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # HTTP
    PORT: int = 3000

    # Database configuration
    DB_DRIVER: str = "postgresql+psycopg"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "books_inventory"

    # Full URL override, e.g. "sqlite+aiosqlite:///./inventory.db" for local runs.
    DB_URL: str | None = None

    # Connection pool: a fixed maximum of concurrent connections. Requests beyond
    # that wait for a free connection; None means wait without a deadline.
    DB_POOL_SIZE: int = 10
    DB_POOL_TIMEOUT: float | None = None

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Destructive routes require this secret when it is set
    ADMIN_PASSWORD: str | None = None

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("logs")
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the SQLAlchemy URL for the store.

        `DB_URL` wins when provided; otherwise the URL is assembled from the
        individual DB_* parts.
        """
        if self.DB_URL:
            return self.DB_URL

        return (
            f"{self.DB_DRIVER}://"
            f"{self.DB_USER}:{self.DB_PASSWORD}@"
            f"{self.DB_HOST}:{self.DB_PORT}/"
            f"{self.DB_NAME}"
        )

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to uppercase so `LOG_LEVEL=debug` is accepted.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        """
        Normalize the LOG_FORMAT environment variable value to lowercase.
        """
        return to_lowercase(v)

    @field_validator("DB_URL", "ADMIN_PASSWORD", "DB_POOL_TIMEOUT", mode="before")
    def empty_as_unset(cls, v):
        # `ADMIN_PASSWORD=` in a .env file means "not configured"
        return blank_to_none(v)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Settings read once per process; tests build their own Settings instead."""
    return Settings()

from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from yarnitt.settings.base import YarnittBaseSettings


class DatabaseSettings(YarnittBaseSettings):
    """
    Database configuration settings.
    Loaded from environment variables or .env file with prefix DB_*
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DB_",
        extra="ignore",
    )

    # Database URL (postgresql+asyncpg://... in production)
    database_url: str = "sqlite+aiosqlite:///./yarnitt.db"

    # Connection pool settings (ignored for SQLite)
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 3600  # 1 hour

    # Echo SQL (for debugging)
    echo_sql: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

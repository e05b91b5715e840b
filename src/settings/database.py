"""Database configuration settings.

Viewing store connection and pool settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.settings.base import get_project_root


class DatabaseSettings(BaseSettings):
    """Viewing store configuration.

    Attributes:
        url: Full SQLAlchemy connection URL. Defaults to a SQLite
            file under the project data directory.
        pool_size: Connection pool size (server databases only).
        pool_overflow: Extra connections allowed above pool_size.
        pool_timeout: Seconds to wait for a pooled connection.
    """

    url: str | None = Field(default=None, alias="DATABASE_URL")

    # Pool settings
    pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    pool_overflow: int = Field(default=10, alias="DB_POOL_OVERFLOW")
    pool_timeout: int = Field(default=30, alias="DB_POOL_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def sync_url(self) -> str:
        """Generate synchronous connection URL."""
        if self.url:
            return self.url
        db_path = get_project_root() / "data" / "viewings.db"
        return f"sqlite:///{db_path}"

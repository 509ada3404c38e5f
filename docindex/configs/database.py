"""
Database configuration settings.

Manages the storage engine used for the embeddings index. SQLite with the
sqlite-vec extension is the default local store; PostgreSQL with pgvector
is supported for shared deployments.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from docindex.configs.base import BaseSettings

SUPPORTED_BACKENDS = ("sqlite", "postgresql")


class DatabaseSettings(BaseSettings):
    """Embeddings index database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCINDEX_DB_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: str = Field(default="sqlite", description="Storage backend: 'sqlite' or 'postgresql'")

    data_path: Path = Field(
        default=Path.home() / ".docindex",
        description="Directory holding the local SQLite index",
    )
    sqlite_filename: str = Field(default="docindex.db", description="SQLite database file name")

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL user")
    password: str = Field(default="postgres", description="PostgreSQL password")
    db: str = Field(default="docindex", description="PostgreSQL database name")

    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Connection pool timeout in seconds")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    @field_validator("backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.lower()
        if value not in SUPPORTED_BACKENDS:
            raise ValueError(f"backend must be one of {SUPPORTED_BACKENDS}, got {value!r}")
        return value

    @property
    def sqlite_path(self) -> Path:
        """Absolute path of the SQLite database file."""
        return self.data_path.expanduser() / self.sqlite_filename

    @property
    def async_database_url(self) -> str:
        """
        Construct the async SQLAlchemy URL for the configured backend.

        Returns:
            str: SQLAlchemy async-compatible database URL
        """
        if self.backend == "sqlite":
            return f"sqlite+aiosqlite:///{self.sqlite_path}"
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db}"
        )

"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from docindex.configs.base import BaseSettings
from docindex.configs.chunking import ChunkingSettings
from docindex.configs.database import DatabaseSettings
from docindex.configs.embedding import EmbeddingSettings
from docindex.configs.search import SearchSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once; call ``get_settings.cache_clear()``
    to force a reload.

    Returns:
        Settings: Application settings instance

    Usage:
        from docindex.configs import get_settings
        settings = get_settings()
    """
    return Settings()

"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from docindex.configs.chunking import ChunkingSettings
from docindex.configs.database import DatabaseSettings
from docindex.configs.embedding import EmbeddingSettings
from docindex.configs.search import SearchSettings
from docindex.configs.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "ChunkingSettings",
    "DatabaseSettings",
    "EmbeddingSettings",
    "SearchSettings",
]

"""
Search configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Similarity search result limits
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docindex.configs.base import BaseSettings


class SearchSettings(BaseSettings):
    """Similarity search configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCINDEX_SEARCH_",
        case_sensitive=False,
        extra="ignore",
    )

    top_k: int = Field(default=3, gt=0, description="Number of results returned by default")
    max_top_k: int = Field(default=100, gt=0, description="Largest k a caller may request")

"""
Chunking configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Chunk size bounds for the semantic chunker
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from docindex.configs.base import BaseSettings


class ChunkingSettings(BaseSettings):
    """Chunk size bounds, measured in characters."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCINDEX_CHUNK_",
        case_sensitive=False,
        extra="ignore",
    )

    max_size: int = Field(default=2000, gt=0, description="Maximum chunk size")
    min_size: int = Field(default=50, gt=0, description="Preferred minimum chunk size")
    snippet_length: int = Field(default=100, gt=0, description="Length of the stored text preview")

    @model_validator(mode="after")
    def _check_bounds(self) -> "ChunkingSettings":
        if self.max_size < self.min_size:
            raise ValueError(
                f"max_size ({self.max_size}) must be >= min_size ({self.min_size})"
            )
        return self

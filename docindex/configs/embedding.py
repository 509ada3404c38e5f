"""
Embedding provider configuration settings.

Model name and dimension are fixed for the lifetime of a process; changing
either against an existing index requires an explicit dimension migration.

Dependencies: pydantic, pydantic_settings
System role: Embedding client and batching configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docindex.configs.base import BaseSettings


class EmbeddingSettings(BaseSettings):
    """Embedding model, batching and retry configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCINDEX_EMBEDDING_",
        case_sensitive=False,
        extra="ignore",
    )

    model: str = Field(
        default="mxbai-embed-large",
        description="Ollama embedding model name",
    )
    dimension: int = Field(
        default=1024,
        gt=0,
        description="Embedding vector dimension produced by the model",
    )
    base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama server URL",
    )

    max_batch_size: int = Field(default=10, gt=0, description="Texts per embedding request")
    max_concurrency: int = Field(
        default=4,
        gt=0,
        description="Embedding batches dispatched concurrently within one sync",
    )
    request_timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")

    max_attempts: int = Field(default=3, gt=0, description="Attempts per batch before giving up")
    backoff_initial: float = Field(default=0.5, ge=0, description="First retry delay in seconds")
    backoff_max: float = Field(default=8.0, ge=0, description="Upper bound for retry delay")
    backoff_jitter: float = Field(default=0.5, ge=0, description="Random jitter added per retry")

"""
Embedding record model.

The persisted entity of the index: chunk text, provenance metadata and
its embedding vector.

Dependencies: pydantic
System role: Data transfer object between the orchestrator and storage
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EmbeddingRecord(BaseModel):
    """Chunk text, metadata and vector as stored in the embeddings table."""

    model_config = ConfigDict(from_attributes=True)

    package: str = Field(description="Package name")
    version: str = Field(description="Package version string (not parsed)")
    source_file: str = Field(description="Path of the originating document")
    source_type: str | None = Field(default=None, description="Source tag")
    start_byte: int | None = Field(default=None, description="Start offset into the document")
    end_byte: int | None = Field(default=None, description="End offset into the document")
    url: str | None = Field(default=None, description="Documentation link")
    text_snippet: str = Field(description="Short preview of the text")
    text: str = Field(description="Full chunk body")
    content_hash: str = Field(description="SHA-256 hex digest of text")
    vector: list[float] = Field(description="Embedding vector")
    inserted_at: datetime | None = Field(default=None, description="Row creation time (UTC)")
    updated_at: datetime | None = Field(default=None, description="Last write time (UTC)")

    @property
    def natural_key(self) -> tuple[str, str, str, str]:
        """Uniqueness boundary: (package, version, source_file, text_snippet)."""
        return (self.package, self.version, self.source_file, self.text_snippet)

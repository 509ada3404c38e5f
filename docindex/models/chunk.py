"""
Chunk domain model.

Represents an ordered unit of document text with byte-offset provenance.
Chunks are created fresh on every chunker run and are never persisted
directly; they are the input to diffing.

Dependencies: pydantic
System role: Document chunk data structure
"""

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """Bounded unit of document text with provenance offsets."""

    model_config = ConfigDict(frozen=True)

    source_file: str = Field(description="Path of the originating document")
    source_type: str = Field(description="Source tag, e.g. 'hexdocs'")
    start_byte: int = Field(ge=0, description="Inclusive UTF-8 byte offset into the document")
    end_byte: int = Field(ge=0, description="Exclusive UTF-8 byte offset into the document")
    text: str = Field(description="Chunk body")
    text_snippet: str = Field(description="Short preview used as part of the natural key")

    @property
    def key(self) -> tuple[str, str]:
        """Per-document natural key: (source_file, text_snippet)."""
        return (self.source_file, self.text_snippet)

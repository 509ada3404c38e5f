"""
Result models returned by the differ, search engine and sync orchestrator.

Dependencies: pydantic
System role: Return types for core operations
"""

from pydantic import BaseModel, Field, computed_field

from docindex.models.chunk import Chunk
from docindex.models.record import EmbeddingRecord


class HashedChunk(BaseModel):
    """Chunk paired with the content hash of its text."""

    chunk: Chunk
    content_hash: str


class DiffResult(BaseModel):
    """Classification of candidate chunks against stored records."""

    unchanged: list[HashedChunk] = Field(default_factory=list)
    upsert: list[HashedChunk] = Field(default_factory=list)
    orphans: list[EmbeddingRecord] = Field(
        default_factory=list,
        description="Stored records with no counterpart among the candidates",
    )


class SearchHit(BaseModel):
    """Stored record with its similarity score."""

    record: EmbeddingRecord
    score: float = Field(description="Cosine similarity, higher is more similar")


class SearchResult(BaseModel):
    """Single ranked search result."""

    package: str
    version: str
    source_file: str
    url: str | None = None
    text_snippet: str
    score: float = Field(description="Cosine similarity, higher is more similar")


class BatchFailure(BaseModel):
    """Embedding batch that could not be embedded or stored."""

    batch_index: int
    chunk_count: int
    error: str


class SyncResult(BaseModel):
    """Outcome of syncing one document revision."""

    chunks_total: int = Field(description="Chunks produced by the chunker")
    chunks_embedded: int = Field(description="Chunks embedded and written")
    chunks_skipped: int = Field(description="Chunks whose stored hash already matched")
    chunks_failed: int = Field(default=0, description="Chunks in batches that failed")
    orphans: int = Field(default=0, description="Stored rows no longer present in the document")
    orphans_deleted: int = Field(default=0, description="Orphan rows removed by pruning")
    failed_batches: list[BatchFailure] = Field(default_factory=list)
    prune_error: str | None = Field(default=None, description="Why orphan pruning failed, if it did")

    @computed_field
    @property
    def success(self) -> bool:
        """True when every batch was stored and pruning, if requested, succeeded."""
        return not self.failed_batches and self.prune_error is None

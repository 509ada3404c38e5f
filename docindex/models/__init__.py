"""
Domain models for chunks, stored records and operation results.
"""

from docindex.models.chunk import Chunk
from docindex.models.record import EmbeddingRecord
from docindex.models.results import (
    BatchFailure,
    DiffResult,
    HashedChunk,
    SearchHit,
    SearchResult,
    SyncResult,
)

__all__ = [
    "Chunk",
    "EmbeddingRecord",
    "BatchFailure",
    "DiffResult",
    "HashedChunk",
    "SearchHit",
    "SearchResult",
    "SyncResult",
]

"""
Content hashing and change classification.

Compares freshly produced chunks with the records already stored for the
same document and decides, per chunk, whether a new embedding is needed.
The differ only classifies; it never writes or deletes.

Dependencies: hashlib, docindex.models
System role: Second stage of the sync pipeline
"""

import hashlib
from collections.abc import Iterable

from docindex.models.chunk import Chunk
from docindex.models.record import EmbeddingRecord
from docindex.models.results import DiffResult, HashedChunk


def content_hash(text: str) -> str:
    """
    Compute the stable fingerprint of a chunk body.

    Args:
        text: Exact chunk text

    Returns:
        str: Lowercase SHA-256 hex digest of the UTF-8 encoded text
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class ContentDiffer:
    """Classify candidate chunks as unchanged or needing an upsert."""

    def classify(
        self,
        candidates: Iterable[Chunk],
        existing: Iterable[EmbeddingRecord],
    ) -> DiffResult:
        """
        Classify candidate chunks against stored records.

        Candidates and records are matched on (source_file, text_snippet).
        When two candidates share a key, the later one in document order
        wins. Stored records with no matching candidate are reported as
        orphans.

        Args:
            candidates: Chunks in document order
            existing: Records currently stored for the same document

        Returns:
            DiffResult: unchanged, upsert and orphans
        """
        deduplicated: dict[tuple[str, str], Chunk] = {}
        for chunk in candidates:
            # Re-insert so a later duplicate takes the later position.
            deduplicated.pop(chunk.key, None)
            deduplicated[chunk.key] = chunk

        stored = {(record.source_file, record.text_snippet): record for record in existing}

        result = DiffResult()
        for key, chunk in deduplicated.items():
            hashed = HashedChunk(chunk=chunk, content_hash=content_hash(chunk.text))
            record = stored.get(key)
            if record is not None and record.content_hash == hashed.content_hash:
                result.unchanged.append(hashed)
            else:
                result.upsert.append(hashed)

        result.orphans = [record for key, record in stored.items() if key not in deduplicated]
        return result

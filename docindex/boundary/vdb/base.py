"""
Vector storage capability interface.

Chunker, differ and search logic depend only on this interface, so the
storage engine can be swapped without touching them.

Dependencies: docindex.models, docindex.core.exceptions
System role: Port between core logic and the storage engine
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from docindex.boundary.vdb.vector_schemas import SearchFilter
from docindex.core.exceptions import ModelMismatchError
from docindex.models.record import EmbeddingRecord
from docindex.models.results import SearchHit


class VectorStorage(ABC):
    """Persistent store of embedding records with similarity search."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Vector length every stored record must have."""
        ...

    @property
    @abstractmethod
    def model(self) -> str | None:
        """Embedding model the index was built with, when known."""
        ...

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare storage and verify it matches the configured dimension and model."""
        ...

    @abstractmethod
    async def upsert(self, record: EmbeddingRecord) -> None:
        """Validate and insert-or-update one record by natural key."""
        ...

    @abstractmethod
    async def upsert_many(self, records: Sequence[EmbeddingRecord]) -> int:
        """Validate all records, then write them in one transaction."""
        ...

    @abstractmethod
    async def similarity_search(
        self,
        search_filter: SearchFilter,
        query_vector: Sequence[float],
        k: int,
    ) -> list[SearchHit]:
        """Return at most k records in scope, most similar first."""
        ...

    @abstractmethod
    async def fetch_existing(
        self,
        source_file: str,
        package: str,
        version: str,
    ) -> list[EmbeddingRecord]:
        """Return the records stored for one document revision."""
        ...

    @abstractmethod
    async def delete_records(
        self,
        package: str,
        version: str,
        keys: Sequence[tuple[str, str]],
    ) -> int:
        """Delete records by (source_file, text_snippet) within a package version."""
        ...

    def check_model(self, model: str) -> None:
        """
        Reject a model other than the one the index was built with.

        Call after ``initialize`` so the recorded model is known.

        Raises:
            ModelMismatchError: When model differs from the recorded model
        """
        if self.model is not None and model != self.model:
            raise ModelMismatchError(
                expected=self.model,
                actual=model,
                details={"hint": "run migrate_dimension to rebuild the index"},
            )

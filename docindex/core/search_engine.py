"""
Similarity search over the documentation index.

Embeds the query with the same model family as the indexed vectors and
delegates ranking to the vector store.

Dependencies: docindex.boundary, docindex.core.exceptions, docindex.models
System role: Query side of the documentation index
"""

import logging

from docindex.boundary.embeddings.client import EmbeddingClient
from docindex.boundary.vdb.base import VectorStorage
from docindex.boundary.vdb.vector_schemas import SearchFilter
from docindex.configs.settings import Settings
from docindex.core.exceptions import (
    DimensionMismatchError,
    ProviderError,
    SearchError,
    ValidationError,
)
from docindex.models.results import SearchResult

logger = logging.getLogger(__name__)


class SearchEngine:
    """Rank stored chunks against a query string."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        store: VectorStorage,
        model: str,
        default_k: int = 3,
        max_k: int = 100,
    ) -> None:
        """
        Initialize search engine.

        Args:
            embedding_client: Client used to embed queries
            store: Vector store holding the index
            model: Embedding model the index was built with
            default_k: Results returned when the caller does not ask for k
            max_k: Largest k a caller may request
        """
        self._client = embedding_client
        self._store = store
        self._model = model
        self._default_k = default_k
        self._max_k = max_k

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        embedding_client: EmbeddingClient,
        store: VectorStorage,
    ) -> "SearchEngine":
        return cls(
            embedding_client,
            store,
            model=settings.embedding.model,
            default_k=settings.search.top_k,
            max_k=settings.search.max_top_k,
        )

    async def search(
        self,
        query_text: str,
        package: str,
        version: str | None = None,
        k: int | None = None,
    ) -> list[SearchResult]:
        """
        Search one package (optionally one version) for a query.

        Args:
            query_text: Natural-language query
            package: Package to search in
            version: Version to restrict to; all versions when None
            k: Maximum number of results; configured default when None

        Returns:
            list[SearchResult]: Results, most similar first. Empty when
                nothing matches or the package is unknown.

        Raises:
            ValidationError: On an empty query or package, or k out of range
            ModelMismatchError: When the configured model is not the model the
                index was built with
            SearchError: When the query cannot be embedded
            DimensionMismatchError: When the query vector does not match the
                indexed dimension
        """
        k = self._default_k if k is None else k
        if not query_text or not query_text.strip():
            raise ValidationError("Query must not be empty", field="query_text")
        if not package:
            raise ValidationError("Package must not be empty", field="package")
        if not 1 <= k <= self._max_k:
            raise ValidationError(
                f"k must be between 1 and {self._max_k}",
                field="k",
                details={"k": k},
            )
        await self._store.initialize()
        self._store.check_model(self._model)

        try:
            query_vector = await self._client.embed_query(query_text, self._model)
        except ProviderError as e:
            raise SearchError(
                "Failed to embed search query",
                package=package,
                details={"model": self._model, "error": e.message},
            ) from e

        if len(query_vector) != self._store.dimension:
            raise DimensionMismatchError(
                expected=self._store.dimension,
                actual=len(query_vector),
                details={"model": self._model},
            )

        hits = await self._store.similarity_search(
            SearchFilter(package=package, version=version),
            query_vector,
            k,
        )
        logger.info(
            f"{__name__}:search - {len(hits)} results for package={package} version={version}"
        )
        return [
            SearchResult(
                package=hit.record.package,
                version=hit.record.version,
                source_file=hit.record.source_file,
                url=hit.record.url,
                text_snippet=hit.record.text_snippet,
                score=hit.score,
            )
            for hit in hits
        ]

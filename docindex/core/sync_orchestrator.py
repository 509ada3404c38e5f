"""
Incremental sync of one document revision into the index.

Chunks the document, diffs the chunks against what is stored for the same
document, embeds only new or modified chunks in bounded batches, and
upserts the results. Re-running with identical text performs no embedding
calls and no writes.

Batches are embedded concurrently (bounded by max_concurrency); each batch
is committed on its own, so a failing batch never rolls back batches that
already succeeded.

Dependencies: docindex.core, docindex.boundary, docindex.models
System role: Entry point for first-time indexing and re-indexing
"""

import asyncio
import logging

from docindex.boundary.embeddings.client import EmbeddingClient
from docindex.boundary.vdb.base import VectorStorage
from docindex.configs.settings import Settings
from docindex.core.chunker import SemanticChunker
from docindex.core.differ import ContentDiffer
from docindex.core.exceptions import (
    ProviderError,
    ValidationError,
    VectorStoreError,
)
from docindex.models.record import EmbeddingRecord
from docindex.models.results import BatchFailure, HashedChunk, SyncResult
from docindex.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Compose chunker, differ, embedding client and vector store."""

    def __init__(
        self,
        chunker: SemanticChunker,
        differ: ContentDiffer,
        embedding_client: EmbeddingClient,
        store: VectorStorage,
        max_batch_size: int = 10,
        max_concurrency: int = 4,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            chunker: Document chunker
            differ: Change classifier
            embedding_client: Embedding adapter
            store: Vector store
            max_batch_size: Texts per embedding request
            max_concurrency: Batches in flight at once

        Raises:
            ValueError: When a limit is not positive
        """
        if max_batch_size < 1 or max_concurrency < 1:
            raise ValueError("max_batch_size and max_concurrency must be positive")

        self._chunker = chunker
        self._differ = differ
        self._client = embedding_client
        self._store = store
        self._max_batch_size = max_batch_size
        self._max_concurrency = max_concurrency

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        embedding_client: EmbeddingClient,
        store: VectorStorage,
    ) -> "SyncOrchestrator":
        return cls(
            SemanticChunker.from_settings(settings.chunking),
            ContentDiffer(),
            embedding_client,
            store,
            max_batch_size=settings.embedding.max_batch_size,
            max_concurrency=settings.embedding.max_concurrency,
        )

    async def sync(
        self,
        document_text: str,
        package: str,
        version: str,
        source_file: str,
        source_type: str,
        model: str,
        url: str | None = None,
        prune_orphans: bool = False,
    ) -> SyncResult:
        """
        Bring the stored chunks of one document in line with its text.

        Args:
            document_text: Converted document text
            package: Package name
            version: Package version
            source_file: Document path
            source_type: Source tag stored with every chunk
            model: Embedding model name
            url: Documentation link stored with every chunk
            prune_orphans: Delete stored chunks that no longer exist in the
                document, once every batch has succeeded

        Returns:
            SyncResult: Counts and any failed batches

        Raises:
            ValidationError: When package, version or source_file is empty
            ModelMismatchError: When model is not the model the index was built with
            VectorStoreError: When the stored state cannot be read
        """
        for name, value in (("package", package), ("version", version), ("source_file", source_file)):
            if not value:
                raise ValidationError(f"{name} must not be empty", field=name)
        await self._store.initialize()
        self._store.check_model(model)

        chunks = self._chunker.chunk(document_text, source_file, source_type)
        existing = await self._store.fetch_existing(source_file, package, version)
        diff = self._differ.classify(chunks, existing)

        batches = [
            diff.upsert[i:i + self._max_batch_size]
            for i in range(0, len(diff.upsert), self._max_batch_size)
        ]
        semaphore = asyncio.Semaphore(self._max_concurrency)
        outcomes = await asyncio.gather(
            *(
                self._embed_and_store(index, batch, semaphore, package, version, model, url)
                for index, batch in enumerate(batches)
            )
        )

        failures = [outcome for outcome in outcomes if isinstance(outcome, BatchFailure)]
        embedded = sum(outcome for outcome in outcomes if isinstance(outcome, int))

        orphans_deleted = 0
        prune_error = None
        if prune_orphans and diff.orphans and not failures:
            try:
                orphans_deleted = await self._store.delete_records(
                    package,
                    version,
                    [(record.source_file, record.text_snippet) for record in diff.orphans],
                )
            except VectorStoreError as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:sync - Orphan pruning failed",
                    e,
                    package=package,
                    version=version,
                    orphan_count=len(diff.orphans),
                )
                prune_error = str(e)

        result = SyncResult(
            chunks_total=len(chunks),
            chunks_embedded=embedded,
            chunks_skipped=len(diff.unchanged),
            chunks_failed=sum(failure.chunk_count for failure in failures),
            orphans=len(diff.orphans),
            orphans_deleted=orphans_deleted,
            failed_batches=failures,
            prune_error=prune_error,
        )
        log_with_context(
            logger,
            logging.INFO if result.success else logging.WARNING,
            f"{__name__}:sync - {source_file}: {result.chunks_embedded} embedded, "
            f"{result.chunks_skipped} skipped, {result.chunks_failed} failed",
            package=package,
            version=version,
            source_file=source_file,
            batches=len(batches),
        )
        return result

    async def _embed_and_store(
        self,
        index: int,
        batch: list[HashedChunk],
        semaphore: asyncio.Semaphore,
        package: str,
        version: str,
        model: str,
        url: str | None,
    ) -> int | BatchFailure:
        """Embed one batch and commit it; report failure instead of raising."""
        async with semaphore:
            try:
                vectors = await self._client.embed_batch([item.chunk.text for item in batch], model)
                records = [
                    EmbeddingRecord(
                        package=package,
                        version=version,
                        source_file=item.chunk.source_file,
                        source_type=item.chunk.source_type,
                        start_byte=item.chunk.start_byte,
                        end_byte=item.chunk.end_byte,
                        url=url,
                        text_snippet=item.chunk.text_snippet,
                        text=item.chunk.text,
                        content_hash=item.content_hash,
                        vector=vector,
                    )
                    for item, vector in zip(batch, vectors)
                ]
                return await self._store.upsert_many(records)
            except (ProviderError, ValidationError, VectorStoreError) as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:_embed_and_store - Batch {index} failed",
                    e,
                    package=package,
                    version=version,
                    batch_index=index,
                    chunk_count=len(batch),
                )
                return BatchFailure(batch_index=index, chunk_count=len(batch), error=str(e))

"""
Dependency injection container.

Builds the store, embedding client, orchestrator and search engine from
settings, once per container.

Dependencies: docindex.configs, docindex.core, docindex.boundary
System role: Composition root for callers (CLI, schedulers, servers)
"""

import logging

from docindex.boundary.embeddings.client import EmbeddingClient
from docindex.boundary.embeddings.provider import ProviderFactory
from docindex.boundary.vdb.sql_vector_store import SQLVectorStore
from docindex.configs import Settings, get_settings
from docindex.core.search_engine import SearchEngine
from docindex.core.sync_orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Container for lazily built, cached service instances."""

    def __init__(
        self,
        settings: Settings | None = None,
        provider_factory: ProviderFactory | None = None,
        store: SQLVectorStore | None = None,
    ) -> None:
        """
        Initialize container.

        Args:
            settings: Application settings; loaded from the environment when None
            provider_factory: Embedding provider factory; Ollama when None
            store: Pre-built vector store; built from settings when None
        """
        self.settings = settings or get_settings()
        self._provider_factory = provider_factory
        self._store = store
        self._embedding_client: EmbeddingClient | None = None
        self._orchestrator: SyncOrchestrator | None = None
        self._search_engine: SearchEngine | None = None

    @property
    def store(self) -> SQLVectorStore:
        """Get cached vector store."""
        if self._store is None:
            logger.info(
                f"{__name__}:store - Creating {self.settings.database.backend} vector store"
            )
            self._store = SQLVectorStore.from_settings(self.settings)
        return self._store

    @property
    def embedding_client(self) -> EmbeddingClient:
        """Get cached embedding client."""
        if self._embedding_client is None:
            self._embedding_client = EmbeddingClient.from_settings(
                self.settings.embedding,
                self._provider_factory,
            )
        return self._embedding_client

    @property
    def orchestrator(self) -> SyncOrchestrator:
        """Get cached sync orchestrator."""
        if self._orchestrator is None:
            self._orchestrator = SyncOrchestrator.from_settings(
                self.settings, self.embedding_client, self.store
            )
        return self._orchestrator

    @property
    def search_engine(self) -> SearchEngine:
        """Get cached search engine."""
        if self._search_engine is None:
            self._search_engine = SearchEngine.from_settings(
                self.settings, self.embedding_client, self.store
            )
        return self._search_engine

    async def close(self) -> None:
        """Dispose of the storage engine's connection pool."""
        if self._store is not None:
            await self._store.dispose()

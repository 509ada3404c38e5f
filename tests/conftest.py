"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite + sqlite-vec engine, vector store, deterministic
fake embedding provider, embedding client with a recorded fake sleep
Dependencies: pytest, sqlalchemy, langchain_core
System role: Test infrastructure and fixture management
"""

import hashlib

import pytest
from langchain_core.embeddings import Embeddings
from sqlalchemy.pool import StaticPool

DIMENSION = 8
MODEL = "fake-embed"

SAMPLE_DOCUMENT = (
    "# Alpha\n\n"
    "Alpha paragraph describing the first feature in detail.\n\n"
    "# Beta\n\n"
    "Beta paragraph describing the second feature in detail.\n\n"
    "# Gamma\n\n"
    "Gamma paragraph describing the third feature in detail.\n"
)


def fake_vector(text: str, dimension: int = DIMENSION) -> list[float]:
    """Deterministic vector derived from the text's SHA-256 digest."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return [float(digest[i] - 128) for i in range(dimension)]


class FakeEmbeddings(Embeddings):
    """
    Deterministic LangChain embeddings provider.

    Args:
        dimension: Vector length returned
        fail_times: Number of initial calls that raise ConnectionError
        fail_on: Calls containing a text with this marker always raise
    """

    def __init__(
        self,
        dimension: int = DIMENSION,
        fail_times: int = 0,
        fail_on: str | None = None,
    ) -> None:
        self.dimension = dimension
        self.fail_times = fail_times
        self.fail_on = fail_on
        self.calls: list[list[str]] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [fake_vector(text, self.dimension) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return fake_vector(text, self.dimension)

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ConnectionError("provider unavailable")
        if self.fail_on and any(self.fail_on in text for text in texts):
            raise TimeoutError(f"provider timed out on {self.fail_on}")
        return self.embed_documents(texts)

    @property
    def embedded_texts(self) -> list[str]:
        return [text for call in self.calls for text in call]


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
async def engine():
    """
    Create in-memory SQLite async engine with sqlite-vec loaded.

    Yields:
        AsyncEngine: Engine sharing one connection across sessions
    """
    from docindex.boundary.db.connection import build_async_engine

    engine = build_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def store(engine):
    """Provide an initialized vector store of dimension DIMENSION."""
    from docindex.boundary.vdb.sql_vector_store import SQLVectorStore

    vector_store = SQLVectorStore(engine, dimension=DIMENSION, model=MODEL)
    await vector_store.initialize()
    return vector_store


@pytest.fixture
def fake_provider() -> FakeEmbeddings:
    """Provide a healthy fake embeddings provider."""
    return FakeEmbeddings()


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    """Provide a sleep replacement recording retry delays."""
    return RecordingSleep()


@pytest.fixture
def embedding_client(fake_provider, fake_sleep):
    """Provide an embedding client backed by the fake provider."""
    from docindex.boundary.embeddings.client import EmbeddingClient

    return EmbeddingClient(lambda model: fake_provider, max_attempts=3, sleep=fake_sleep)


@pytest.fixture
def chunker():
    """Provide a chunker sized so SAMPLE_DOCUMENT yields three chunks."""
    from docindex.core.chunker import SemanticChunker

    return SemanticChunker(max_size=120, min_size=20, snippet_length=20)


@pytest.fixture
def orchestrator(chunker, embedding_client, store):
    """Provide a sync orchestrator wired to the in-memory store."""
    from docindex.core.differ import ContentDiffer
    from docindex.core.sync_orchestrator import SyncOrchestrator

    return SyncOrchestrator(
        chunker,
        ContentDiffer(),
        embedding_client,
        store,
        max_batch_size=2,
        max_concurrency=2,
    )


@pytest.fixture
def sample_document() -> str:
    """Three heading sections, each a little longer than the snippet length."""
    return SAMPLE_DOCUMENT


@pytest.fixture
def make_provider():
    """Factory for fake providers with custom dimension or failure modes."""
    return FakeEmbeddings


@pytest.fixture
def make_client(fake_sleep):
    """Factory for embedding clients wrapping a given provider."""
    from docindex.boundary.embeddings.client import EmbeddingClient

    def _make(provider: FakeEmbeddings, max_attempts: int = 3) -> EmbeddingClient:
        return EmbeddingClient(lambda model: provider, max_attempts=max_attempts, sleep=fake_sleep)

    return _make


@pytest.fixture
def make_record():
    """Factory for valid embedding records; vector defaults to the fake embedding of text."""
    from docindex.core.differ import content_hash
    from docindex.models.record import EmbeddingRecord

    def _make(
        text: str,
        package: str = "phoenix",
        version: str = "1.7.0",
        source_file: str = "guides/intro.md",
        snippet: str | None = None,
        vector: list[float] | None = None,
        url: str | None = None,
    ) -> EmbeddingRecord:
        return EmbeddingRecord(
            package=package,
            version=version,
            source_file=source_file,
            source_type="hexdocs",
            start_byte=0,
            end_byte=len(text.encode("utf-8")),
            url=url,
            text_snippet=snippet if snippet is not None else text,
            text=text,
            content_hash=content_hash(text),
            vector=vector if vector is not None else fake_vector(text),
        )

    return _make

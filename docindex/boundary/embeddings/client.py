"""
Embedding client with bounded retries.

Turns a batch of texts into vectors through an embedding provider. Each
batch is all-or-nothing: transient provider failures are retried with
jittered exponential backoff up to a fixed number of attempts, after which
the batch fails as a whole with ProviderError.

Dependencies: tenacity, langchain_core, docindex.core.exceptions
System role: Embedding generation adapter
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from docindex.boundary.embeddings.provider import (
    EmbeddingProvider,
    ProviderFactory,
    ollama_provider_factory,
)
from docindex.configs.embedding import EmbeddingSettings
from docindex.core.exceptions import DocIndexException, ProviderError

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    """Provider failures are retried; our own validation errors and cancellation are not."""
    return isinstance(exc, Exception) and not isinstance(exc, DocIndexException)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"{__name__}:embed_batch - Attempt {retry_state.attempt_number} failed "
        f"({type(exc).__name__}: {exc}); retrying"
    )


class EmbeddingClient:
    """Batch embedding adapter over a provider factory."""

    def __init__(
        self,
        provider_factory: ProviderFactory,
        max_attempts: int = 3,
        backoff_initial: float = 0.5,
        backoff_max: float = 8.0,
        backoff_jitter: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize client.

        Args:
            provider_factory: Maps a model name to an embedding provider
            max_attempts: Attempts per batch, including the first
            backoff_initial: First retry delay in seconds
            backoff_max: Upper bound for the retry delay
            backoff_jitter: Maximum random jitter added to each delay
            sleep: Async sleep used between attempts (injectable for tests)

        Raises:
            ValueError: When max_attempts < 1
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._provider_factory = provider_factory
        self._providers: dict[str, EmbeddingProvider] = {}
        self._max_attempts = max_attempts
        self._wait = wait_exponential(multiplier=backoff_initial, max=backoff_max) + wait_random(
            0, backoff_jitter
        )
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: EmbeddingSettings,
        provider_factory: ProviderFactory | None = None,
    ) -> "EmbeddingClient":
        """Build a client from embedding settings; defaults to Ollama providers."""
        return cls(
            provider_factory or ollama_provider_factory(settings),
            max_attempts=settings.max_attempts,
            backoff_initial=settings.backoff_initial,
            backoff_max=settings.backoff_max,
            backoff_jitter=settings.backoff_jitter,
        )

    def provider_for(self, model: str) -> EmbeddingProvider:
        """Return the cached provider for a model, creating it on first use."""
        if model not in self._providers:
            self._providers[model] = self._provider_factory(model)
        return self._providers[model]

    async def embed_batch(self, texts: Sequence[str], model: str) -> list[list[float]]:
        """
        Embed a batch of texts.

        Args:
            texts: Texts to embed
            model: Embedding model name

        Returns:
            list[list[float]]: One vector per text, in input order

        Raises:
            ProviderError: When retries are exhausted or the response is malformed
        """
        texts = list(texts)
        if not texts:
            return []

        provider = self.provider_for(model)
        attempts = 0
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=self._wait,
                retry=retry_if_exception(_is_transient),
                before_sleep=_log_retry,
                sleep=self._sleep,
                reraise=True,
            ):
                with attempt:
                    attempts += 1
                    vectors = await provider.aembed_documents(texts)
        except DocIndexException:
            raise
        except Exception as e:
            raise ProviderError(
                message=f"Embedding request failed: {e}",
                model=model,
                batch_size=len(texts),
                attempts=attempts,
            ) from e

        return self._validate_response(vectors, texts, model)

    async def embed_query(self, text: str, model: str) -> list[float]:
        """Embed a single query text."""
        vectors = await self.embed_batch([text], model)
        return vectors[0]

    @staticmethod
    def _validate_response(vectors, texts: list[str], model: str) -> list[list[float]]:
        """Reject responses that do not carry exactly one uniform vector per text."""
        if vectors is None or len(vectors) != len(texts):
            raise ProviderError(
                message="Embedding provider returned the wrong number of vectors",
                model=model,
                batch_size=len(texts),
                details={"returned": 0 if vectors is None else len(vectors)},
            )
        lengths = {len(vector) for vector in vectors}
        if len(lengths) != 1 or 0 in lengths:
            raise ProviderError(
                message="Embedding provider returned vectors of inconsistent length",
                model=model,
                batch_size=len(texts),
                details={"lengths": sorted(lengths)},
            )
        return [[float(x) for x in vector] for vector in vectors]

"""
Embedding provider capability and the Ollama-backed factory.

Any LangChain ``Embeddings`` implementation can serve as a provider; the
index only needs ``aembed_documents``. Providers are created per model name
by a factory so that the model can be chosen per call.

Dependencies: langchain_core, langchain_ollama, docindex.configs
System role: Embedding backend selection
"""

import logging
from collections.abc import Callable

from langchain_core.embeddings import Embeddings
from langchain_ollama import OllamaEmbeddings

from docindex.configs.embedding import EmbeddingSettings

logger = logging.getLogger(__name__)

EmbeddingProvider = Embeddings
ProviderFactory = Callable[[str], EmbeddingProvider]


def ollama_provider_factory(settings: EmbeddingSettings) -> ProviderFactory:
    """
    Build a factory creating Ollama embedding providers.

    Requests go to ``POST {base_url}/api/embed`` with ``{model, input}``.

    Args:
        settings: Embedding settings (base URL, request timeout)

    Returns:
        ProviderFactory: Callable mapping a model name to a provider
    """

    def factory(model: str) -> EmbeddingProvider:
        logger.info(
            f"{__name__}:ollama_provider_factory - Creating Ollama provider "
            f"model={model}, base_url={settings.base_url}"
        )
        return OllamaEmbeddings(
            model=model,
            base_url=settings.base_url,
            client_kwargs={"timeout": settings.request_timeout},
        )

    return factory

"""
Embedding boundary: provider capability, Ollama factory and retrying client.
"""

from docindex.boundary.embeddings.client import EmbeddingClient
from docindex.boundary.embeddings.provider import (
    EmbeddingProvider,
    ProviderFactory,
    ollama_provider_factory,
)

__all__ = [
    "EmbeddingClient",
    "EmbeddingProvider",
    "ProviderFactory",
    "ollama_provider_factory",
]

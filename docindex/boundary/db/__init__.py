"""
Database boundary layer: ORM models, vector column type, connection and
schema management.

Exports:
  - Base, TimestampMixin: Model building blocks
  - EmbeddingModel, IndexMetadataModel: Index tables
  - EmbeddingVector: Dialect-aware vector column type
  - build_async_engine(), get_async_engine(), get_async_session_factory()

Dependencies: sqlalchemy, docindex.configs
"""

from docindex.boundary.db.base import Base, TimestampMixin
from docindex.boundary.db.connection import (
    build_async_engine,
    get_async_engine,
    get_async_session_factory,
)
from docindex.boundary.db.embedding_model import (
    NATURAL_KEY,
    EmbeddingModel,
    IndexMetadataModel,
)
from docindex.boundary.db.vector_type import EmbeddingVector

__all__ = [
    "Base",
    "TimestampMixin",
    "EmbeddingModel",
    "IndexMetadataModel",
    "EmbeddingVector",
    "NATURAL_KEY",
    "build_async_engine",
    "get_async_engine",
    "get_async_session_factory",
]

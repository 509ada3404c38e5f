"""
Dialect-aware embedding vector column type.

SQLite stores vectors as little-endian float32 BLOBs, the format the
sqlite-vec extension operates on. PostgreSQL uses the pgvector ``vector``
type. Lengths are not coerced here; the vector store validates them.

Dependencies: sqlalchemy, sqlite_vec, pgvector
System role: Vector column mapping for the embeddings table
"""

import struct
from typing import Any

from pgvector.sqlalchemy import Vector
from sqlalchemy import LargeBinary
from sqlalchemy.types import TypeDecorator
import sqlite_vec


class EmbeddingVector(TypeDecorator):
    """Vector column stored in the storage engine's native vector format."""

    impl = LargeBinary
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Vector())
        return dialect.type_descriptor(LargeBinary())

    def process_bind_param(self, value: Any, dialect) -> Any:
        if value is None:
            return None
        if dialect.name == "postgresql":
            return [float(x) for x in value]
        return sqlite_vec.serialize_float32([float(x) for x in value])

    def process_result_value(self, value: Any, dialect) -> list[float] | None:
        if value is None:
            return None
        if isinstance(value, (bytes, bytearray, memoryview)):
            raw = bytes(value)
            return list(struct.unpack(f"<{len(raw) // 4}f", raw))
        return [float(x) for x in value]

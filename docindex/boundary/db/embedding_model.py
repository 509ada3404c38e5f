"""
Embedding ORM models.

Dependencies: sqlalchemy, docindex.boundary.db.base
System role: Persistence of chunk text, metadata and vectors
"""

from sqlalchemy import Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from docindex.boundary.db.base import Base, TimestampMixin
from docindex.boundary.db.vector_type import EmbeddingVector

NATURAL_KEY = ("package", "version", "source_file", "text_snippet")


class EmbeddingModel(Base, TimestampMixin):
    """
    Embedded documentation chunk.

    Attributes:
        id: Integer primary key
        package: Package name
        version: Package version string
        source_file: Path of the originating document
        source_type: Source tag (e.g. 'hexdocs')
        start_byte: Start offset into the document
        end_byte: End offset into the document
        url: Documentation link
        text_snippet: Short preview of text, part of the natural key
        text: Full chunk body
        content_hash: SHA-256 hex digest of text
        vector: Embedding in the engine's vector format

    Constraints:
        UNIQUE(package, version, source_file, text_snippet)
    """

    __tablename__ = "embeddings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    package: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[str] = mapped_column(String(255), nullable=False)
    source_file: Mapped[str] = mapped_column(String(1024), nullable=False)
    source_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    start_byte: Mapped[int | None] = mapped_column(Integer, nullable=True)
    end_byte: Mapped[int | None] = mapped_column(Integer, nullable=True)
    url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    text_snippet: Mapped[str] = mapped_column(Text, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    vector: Mapped[list[float]] = mapped_column(EmbeddingVector(), nullable=False)

    __table_args__ = (
        UniqueConstraint(*NATURAL_KEY, name="uq_embeddings_natural_key"),
        Index("idx_embeddings_package_version", "package", "version"),
        Index("idx_embeddings_content_hash", "package", "version", "content_hash"),
    )


class IndexMetadataModel(Base):
    """
    Key/value facts about the index itself.

    Holds ``embedding_dimension`` and ``embedding_model`` so that a process
    configured for a different model family is detected at startup.
    """

    __tablename__ = "index_metadata"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)

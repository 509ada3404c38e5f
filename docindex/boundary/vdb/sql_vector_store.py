"""
SQLAlchemy vector store.

Persists embedding records in the ``embeddings`` table and delegates
vector distance computation to the storage engine: sqlite-vec's
``vec_distance_cosine`` on SQLite, pgvector's ``<=>`` on PostgreSQL.

Similarity metric: cosine. ``score = 1 - cosine_distance``, so scores are
cosine similarities in [-1, 1] and higher means more similar. Results are
ordered by distance, then most recent ``updated_at``, then natural key.

Dependencies: sqlalchemy, docindex.boundary.db, docindex.core.exceptions
System role: Vector store for the documentation index
"""

import asyncio
import logging
import math
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from sqlalchemy import Float, and_, bindparam, delete, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from docindex.boundary.db.base import utc_now
from docindex.boundary.db.connection import get_async_engine, get_async_session_factory
from docindex.boundary.db.embedding_model import NATURAL_KEY, EmbeddingModel
from docindex.boundary.db.migrations import (
    DIMENSION_KEY,
    MODEL_KEY,
    create_tables,
    read_index_metadata,
    recreate_embeddings_table,
    write_index_metadata,
)
from docindex.boundary.db.vector_type import EmbeddingVector
from docindex.boundary.vdb.base import VectorStorage
from docindex.boundary.vdb.vector_schemas import SearchFilter
from docindex.configs.settings import Settings
from docindex.core.differ import content_hash
from docindex.core.exceptions import (
    DimensionMismatchError,
    ModelMismatchError,
    ValidationError,
    VectorStoreError,
)
from docindex.models.record import EmbeddingRecord
from docindex.models.results import SearchHit

logger = logging.getLogger(__name__)

# Columns rewritten when an upsert hits an existing natural key.
_UPDATE_COLUMNS = (
    "source_type",
    "start_byte",
    "end_byte",
    "url",
    "text",
    "content_hash",
    "vector",
    "updated_at",
)

# Keys per DELETE statement; keeps the OR chain under SQLite's expression depth limit.
_DELETE_GROUP_SIZE = 200


class SQLVectorStore(VectorStorage):
    """
    Vector store backed by SQLite + sqlite-vec or PostgreSQL + pgvector.

    The store is created lazily: the first operation creates missing
    tables and checks the recorded index dimension and embedding model
    against the configured ones. A mismatch raises DimensionMismatchError
    or ModelMismatchError until ``migrate_dimension`` is run. Writes re-check
    the recorded values inside their transaction, so a migration run through
    another store instance is noticed.
    """

    def __init__(self, engine: AsyncEngine, dimension: int, model: str | None = None) -> None:
        """
        Initialize store with an engine and the configured dimension.

        Args:
            engine: Async SQLAlchemy engine
            dimension: Embedding dimension of the active model family
            model: Embedding model name recorded alongside the dimension

        Raises:
            ValidationError: When dimension is not positive
        """
        if dimension <= 0:
            raise ValidationError("Embedding dimension must be positive", field="dimension")

        self._engine = engine
        self._session_factory = get_async_session_factory(engine)
        self._dimension = dimension
        self._model = model
        self._initialized = False
        self._init_lock = asyncio.Lock()
        # SQLite has a single writer; serialize write transactions in-process.
        self._write_lock = asyncio.Lock() if engine.dialect.name == "sqlite" else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "SQLVectorStore":
        """Build a store, and its engine, from application settings."""
        engine = get_async_engine(settings.database)
        return cls(engine, settings.embedding.dimension, settings.embedding.model)

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model(self) -> str | None:
        return self._model

    @property
    def dialect(self) -> str:
        return self._engine.dialect.name

    async def initialize(self) -> None:
        """
        Create missing tables and verify the recorded dimension and model.

        A store configured without a model adopts the recorded one.

        Raises:
            DimensionMismatchError: When the index was built for another dimension
            ModelMismatchError: When the index was built with another model
            VectorStoreError: When the schema cannot be created
        """
        async with self._init_lock:
            if self._initialized:
                return
            try:
                async with self._engine.begin() as conn:
                    await create_tables(conn)
                    metadata = await read_index_metadata(conn)
                    unrecorded = DIMENSION_KEY not in metadata or (
                        self._model is not None and MODEL_KEY not in metadata
                    )
                    if unrecorded:
                        metadata.setdefault(DIMENSION_KEY, str(self._dimension))
                        if self._model is not None:
                            metadata.setdefault(MODEL_KEY, self._model)
                        await write_index_metadata(
                            conn, int(metadata[DIMENSION_KEY]), metadata.get(MODEL_KEY)
                        )
            except SQLAlchemyError as e:
                raise VectorStoreError(
                    message="Failed to initialize embeddings schema",
                    operation="initialize",
                    details={"error": str(e)},
                ) from e

            self._check_recorded(metadata)
            if self._model is None:
                self._model = metadata.get(MODEL_KEY)

            self._initialized = True
            logger.info(
                f"{__name__}:initialize - Embeddings index ready "
                f"(dialect={self.dialect}, dimension={self._dimension})"
            )

    async def migrate_dimension(self, dimension: int, model: str | None = None) -> None:
        """
        Rebuild the embeddings table for a new embedding dimension or model.

        All stored embeddings are dropped; callers must re-sync afterwards.
        The new dimension and model are recorded in index_metadata.

        Args:
            dimension: New embedding dimension
            model: Embedding model producing vectors of that dimension

        Raises:
            ValidationError: When dimension is not positive
            VectorStoreError: When the migration fails
        """
        if dimension <= 0:
            raise ValidationError("Embedding dimension must be positive", field="dimension")

        async with self._init_lock, self._write_guard():
            try:
                async with self._engine.begin() as conn:
                    await create_tables(conn)
                    await recreate_embeddings_table(conn)
                    await write_index_metadata(conn, dimension, model or self._model)
            except SQLAlchemyError as e:
                raise VectorStoreError(
                    message="Failed to migrate embedding dimension",
                    operation="migrate",
                    details={"error": str(e), "dimension": dimension},
                ) from e

            logger.warning(
                f"{__name__}:migrate_dimension - Index rebuilt: "
                f"dimension {self._dimension} -> {dimension}"
            )
            self._dimension = dimension
            self._model = model or self._model
            self._initialized = True

    async def upsert(self, record: EmbeddingRecord) -> None:
        """
        Validate and insert-or-update one record.

        Args:
            record: Record to write

        Raises:
            ValidationError: When the record is malformed or has the wrong dimension
            VectorStoreError: When the write fails
        """
        await self.upsert_many([record])

    async def upsert_many(self, records: Sequence[EmbeddingRecord]) -> int:
        """
        Validate every record, then write all of them in one transaction.

        Args:
            records: Records to write

        Returns:
            int: Number of records written

        Raises:
            ValidationError: When any record is invalid; nothing is written
            VectorStoreError: When the transaction fails; nothing is written
        """
        if not records:
            return 0
        await self.initialize()
        for record in records:
            self._validate(record)

        now = utc_now()
        try:
            async with self._write_session() as session:
                self._check_recorded(await read_index_metadata(session))
                for record in records:
                    await session.execute(self._upsert_statement(record, now))
        except SQLAlchemyError as e:
            raise VectorStoreError(
                message="Failed to upsert embeddings",
                operation="upsert",
                details={"error": str(e), "record_count": len(records)},
            ) from e

        logger.debug(f"{__name__}:upsert_many - Upserted {len(records)} records")
        return len(records)

    async def similarity_search(
        self,
        search_filter: SearchFilter,
        query_vector: Sequence[float],
        k: int,
    ) -> list[SearchHit]:
        """
        Rank stored records in scope against a query vector.

        Args:
            search_filter: Package, and optionally version, to search in
            query_vector: Query embedding
            k: Maximum number of results

        Returns:
            list[SearchHit]: At most k hits, highest score first

        Raises:
            DimensionMismatchError: When the query vector has the wrong length
            ValidationError: When k < 1
            VectorStoreError: When the query fails
        """
        if k < 1:
            raise ValidationError("k must be at least 1", field="k")
        if len(query_vector) != self._dimension:
            raise DimensionMismatchError(expected=self._dimension, actual=len(query_vector))
        await self.initialize()

        distance = self._distance(query_vector)
        stmt = (
            select(EmbeddingModel, distance.label("distance"))
            .where(EmbeddingModel.package == search_filter.package)
            .order_by(
                distance,
                EmbeddingModel.updated_at.desc(),
                EmbeddingModel.package,
                EmbeddingModel.version,
                EmbeddingModel.source_file,
                EmbeddingModel.text_snippet,
            )
            .limit(k)
        )
        if search_filter.version is not None:
            stmt = stmt.where(EmbeddingModel.version == search_filter.version)

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.all()
        except SQLAlchemyError as e:
            raise VectorStoreError(
                message="Failed to query embeddings",
                operation="query",
                details={"error": str(e), "package": search_filter.package},
            ) from e

        return [
            SearchHit(record=EmbeddingRecord.model_validate(model), score=1.0 - float(dist))
            for model, dist in rows
        ]

    async def fetch_existing(
        self,
        source_file: str,
        package: str,
        version: str,
    ) -> list[EmbeddingRecord]:
        """
        Return the records stored for one document revision.

        Args:
            source_file: Document path
            package: Package name
            version: Package version

        Returns:
            list[EmbeddingRecord]: Stored records in insertion order
        """
        await self.initialize()
        stmt = (
            select(EmbeddingModel)
            .where(
                EmbeddingModel.package == package,
                EmbeddingModel.version == version,
                EmbeddingModel.source_file == source_file,
            )
            .order_by(EmbeddingModel.id)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                models = result.scalars().all()
        except SQLAlchemyError as e:
            raise VectorStoreError(
                message="Failed to fetch existing embeddings",
                operation="fetch",
                details={"error": str(e), "source_file": source_file},
            ) from e
        return [EmbeddingRecord.model_validate(model) for model in models]

    async def count(self, package: str | None = None, version: str | None = None) -> int:
        """Count stored records, optionally scoped to a package and version."""
        await self.initialize()
        stmt = select(func.count(EmbeddingModel.id))
        if package is not None:
            stmt = stmt.where(EmbeddingModel.package == package)
        if version is not None:
            stmt = stmt.where(EmbeddingModel.version == version)
        try:
            async with self._session_factory() as session:
                return (await session.execute(stmt)).scalar_one()
        except SQLAlchemyError as e:
            raise VectorStoreError(
                message="Failed to count embeddings",
                operation="count",
                details={"error": str(e)},
            ) from e

    async def embeddings_exist(self, package: str, version: str) -> bool:
        """Check whether any embeddings are stored for a package version."""
        return await self.count(package, version) > 0

    async def delete_embeddings(self, package: str, version: str) -> int:
        """
        Delete every record of a package version.

        Args:
            package: Package name
            version: Package version

        Returns:
            int: Number of records deleted
        """
        stmt = delete(EmbeddingModel).where(
            EmbeddingModel.package == package,
            EmbeddingModel.version == version,
        )
        deleted = await self._execute_delete([stmt], "delete")
        logger.info(f"{__name__}:delete_embeddings - Deleted {deleted} rows for {package} {version}")
        return deleted

    async def delete_records(
        self,
        package: str,
        version: str,
        keys: Sequence[tuple[str, str]],
    ) -> int:
        """
        Delete records by (source_file, text_snippet) within a package version.

        Keys are deleted in groups of bounded size, all in one transaction.

        Args:
            package: Package name
            version: Package version
            keys: Per-document natural keys to remove

        Returns:
            int: Number of records deleted
        """
        keys = list(keys)
        if not keys:
            return 0
        statements = [
            delete(EmbeddingModel).where(
                EmbeddingModel.package == package,
                EmbeddingModel.version == version,
                or_(
                    *(
                        and_(
                            EmbeddingModel.source_file == source_file,
                            EmbeddingModel.text_snippet == snippet,
                        )
                        for source_file, snippet in keys[start:start + _DELETE_GROUP_SIZE]
                    )
                ),
            )
            for start in range(0, len(keys), _DELETE_GROUP_SIZE)
        ]
        return await self._execute_delete(statements, "delete")

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self._engine.dispose()

    async def _execute_delete(self, statements, operation: str) -> int:
        await self.initialize()
        deleted = 0
        try:
            async with self._write_session() as session:
                for stmt in statements:
                    result = await session.execute(stmt)
                    deleted += result.rowcount or 0
            return deleted
        except SQLAlchemyError as e:
            raise VectorStoreError(
                message="Failed to delete embeddings",
                operation=operation,
                details={"error": str(e)},
            ) from e

    def _check_recorded(self, metadata: dict[str, str]) -> None:
        """Refuse an index recorded for another dimension or model."""
        hint = {"hint": "run migrate_dimension to rebuild the index"}
        recorded_dimension = metadata.get(DIMENSION_KEY)
        if recorded_dimension is not None and int(recorded_dimension) != self._dimension:
            raise DimensionMismatchError(
                expected=int(recorded_dimension),
                actual=self._dimension,
                details=hint,
            )
        recorded_model = metadata.get(MODEL_KEY)
        if recorded_model and self._model and recorded_model != self._model:
            raise ModelMismatchError(expected=recorded_model, actual=self._model, details=hint)

    def _validate(self, record: EmbeddingRecord) -> None:
        """Enforce the record invariants before anything is written."""
        for field in ("package", "version", "source_file", "text"):
            if not getattr(record, field):
                raise ValidationError(f"{field} must not be empty", field=field)
        if len(record.vector) != self._dimension:
            raise DimensionMismatchError(
                expected=self._dimension,
                actual=len(record.vector),
                details={"source_file": record.source_file},
            )
        if not all(math.isfinite(x) for x in record.vector):
            raise ValidationError("vector contains non-finite values", field="vector")
        if record.content_hash != content_hash(record.text):
            raise ValidationError(
                "content_hash does not match text",
                field="content_hash",
                details={"source_file": record.source_file},
            )

    def _upsert_statement(self, record: EmbeddingRecord, now):
        insert = pg_insert if self.dialect == "postgresql" else sqlite_insert
        values = record.model_dump(exclude={"inserted_at", "updated_at"})
        values.update(inserted_at=now, updated_at=now)
        stmt = insert(EmbeddingModel).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=list(NATURAL_KEY),
            set_={column: stmt.excluded[column] for column in _UPDATE_COLUMNS},
        )

    def _distance(self, query_vector: Sequence[float]):
        """Cosine distance between the stored vector and the query, computed by the engine."""
        param = bindparam("query_vector", value=list(query_vector), type_=EmbeddingVector())
        if self.dialect == "postgresql":
            return EmbeddingModel.vector.op("<=>", return_type=Float)(param)
        return func.vec_distance_cosine(EmbeddingModel.vector, param, type_=Float)

    @asynccontextmanager
    async def _write_guard(self) -> AsyncIterator[None]:
        if self._write_lock is None:
            yield
        else:
            async with self._write_lock:
                yield

    @asynccontextmanager
    async def _write_session(self) -> AsyncIterator[AsyncSession]:
        async with self._write_guard():
            async with self._session_factory() as session:
                async with session.begin():
                    yield session

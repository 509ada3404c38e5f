"""
Schema creation and embedding-dimension migration.

The embeddings table is bound to one embedding dimension, recorded in the
index_metadata table. A process configured for another dimension must run
``recreate_embeddings_table`` explicitly; nothing here coerces vectors.

Dependencies: sqlalchemy
System role: Schema lifecycle for the embeddings index
"""

import logging

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

from docindex.boundary.db.base import Base
from docindex.boundary.db.embedding_model import EmbeddingModel, IndexMetadataModel

logger = logging.getLogger(__name__)

DIMENSION_KEY = "embedding_dimension"
MODEL_KEY = "embedding_model"


async def create_tables(conn: AsyncConnection) -> None:
    """Create missing tables and, on PostgreSQL, the pgvector extension."""
    if conn.dialect.name == "postgresql":
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
    await conn.run_sync(Base.metadata.create_all)


async def recreate_embeddings_table(conn: AsyncConnection) -> None:
    """Drop and recreate the embeddings table. All stored vectors are lost."""
    table = EmbeddingModel.__table__
    await conn.run_sync(lambda sync_conn: table.drop(sync_conn, checkfirst=True))
    await conn.run_sync(lambda sync_conn: table.create(sync_conn, checkfirst=True))
    logger.warning(f"{__name__}:recreate_embeddings_table - Embeddings table recreated")


async def read_index_metadata(conn: AsyncConnection | AsyncSession) -> dict[str, str]:
    """Return the recorded index facts as a dict."""
    result = await conn.execute(select(IndexMetadataModel.key, IndexMetadataModel.value))
    return {row.key: row.value for row in result}


async def write_index_metadata(conn: AsyncConnection, dimension: int, model: str | None) -> None:
    """Record the dimension (and model, when known) the index is built for."""
    values = {DIMENSION_KEY: str(dimension)}
    if model:
        values[MODEL_KEY] = model

    insert = pg_insert if conn.dialect.name == "postgresql" else sqlite_insert
    for key, value in values.items():
        stmt = insert(IndexMetadataModel).values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=[IndexMetadataModel.key],
            set_={"value": stmt.excluded.value},
        )
        await conn.execute(stmt)

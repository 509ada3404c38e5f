"""
Vector database boundary: storage capability and SQLAlchemy implementation.
"""

from docindex.boundary.vdb.base import VectorStorage
from docindex.boundary.vdb.sql_vector_store import SQLVectorStore
from docindex.boundary.vdb.vector_schemas import SearchFilter

__all__ = ["VectorStorage", "SQLVectorStore", "SearchFilter"]

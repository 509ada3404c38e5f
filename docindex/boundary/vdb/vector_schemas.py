"""
Vector store schemas.

Dependencies: pydantic
System role: Type definitions for vector store queries
"""

from pydantic import BaseModel, Field


class SearchFilter(BaseModel):
    """Scope of a similarity search."""

    package: str = Field(min_length=1, description="Package to search in")
    version: str | None = Field(
        default=None,
        description="Restrict to one version; all versions when None",
    )

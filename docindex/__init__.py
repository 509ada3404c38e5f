"""
docindex: incrementally synchronized vector index for documentation text.

Documents are chunked, diffed against stored content hashes, embedded only
where content changed, and stored with their vectors for similarity search.
"""

__version__ = "0.1.0"

"""
Boundary adapters: database, vector store and embedding provider.
"""

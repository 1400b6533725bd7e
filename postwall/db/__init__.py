"""
Post storage for PostWall.

This package provides a pluggable storage interface supporting:
- PostgreSQL through an asyncpg connection pool (production)
- In-memory (for testing and local development)

Invariants:
    - One storage round trip per operation
    - Parameters are always bound, never interpolated into SQL
    - Driver failures surface as StorageError
"""

from ..errors import StorageError
from .base import PostStore, create_store
from .memory import InMemoryPostStore
from .postgres import Database, PostgresPostStore

__all__ = [
    # Protocol and errors
    "PostStore",
    "StorageError",
    # Factory
    "create_store",
    # Implementations
    "Database",
    "PostgresPostStore",
    "InMemoryPostStore",
]

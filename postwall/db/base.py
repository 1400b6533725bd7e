"""
Base protocol for post storage backends.

This module defines the PostStore protocol that both the PostgreSQL and
the in-memory backends implement, plus the factory that picks one from
settings.

Invariants:
    - Every operation is a single round trip to the storage engine
    - like_post() increments atomically; concurrent likes are never lost
    - like_post() and delete_post() return None when no post matches
    - Results are Post models (img already exposed as url)

How to change safely:
    - Protocol changes require updating every implementation
    - Keep one statement per operation; no multi-statement transactions
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..models import Post

if TYPE_CHECKING:
    from ..config import Settings


@runtime_checkable
class PostStore(Protocol):
    """Protocol for post storage backends.

    Example:
        >>> store = create_store(Settings())
        >>> await store.connect()
        >>> post = await store.create_post("A", "http://x", "d")
        >>> liked = await store.like_post(post.id)
        >>> liked.likes
        1
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open resources. Must be called before any other operation.

        Raises:
            StorageError: If the backend is unreachable
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release resources."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Whether the backend currently answers queries."""
        ...

    @abstractmethod
    async def list_posts(self) -> list[Post]:
        """All posts, ordered by id descending (newest first)."""
        ...

    @abstractmethod
    async def create_post(self, titulo: str, url: str, descripcion: str) -> Post:
        """Persist a new post with likes = 0 and return it with its id."""
        ...

    @abstractmethod
    async def like_post(self, post_id: int) -> Post | None:
        """Increment likes by one (null counts as 0) and return the updated post."""
        ...

    @abstractmethod
    async def delete_post(self, post_id: int) -> Post | None:
        """Delete a post and return its contents prior to deletion."""
        ...


def create_store(settings: Settings) -> PostStore:
    """Factory function to create a post store from configuration.

    Args:
        settings: Service settings

    Returns:
        Appropriate PostStore implementation

    Raises:
        ValueError: If backend is not supported
    """
    from .memory import InMemoryPostStore
    from .postgres import Database, PostgresPostStore

    if settings.store_backend == "postgres":
        return PostgresPostStore(
            Database.from_settings(settings),
            create_schema=settings.db_create_schema,
        )
    elif settings.store_backend == "memory":
        return InMemoryPostStore()
    else:
        raise ValueError(f"Unsupported store backend: {settings.store_backend}")

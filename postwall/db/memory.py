"""
In-memory post store for testing.

This module provides a dict-backed PostStore for:
- Unit and integration tests
- Local development without a PostgreSQL server (STORE_BACKEND=memory)

Invariants:
    - All data is lost on process exit
    - Ids come from a counter and are never reused
    - Each operation holds the lock for its whole read-modify-write, so
      concurrent likes are never lost

How to change safely:
    - This is test/dev code, changes don't affect production
    - Keep behaviour identical to PostgresPostStore
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..errors import StorageError
from ..models import Post, post_from_row

logger = logging.getLogger(__name__)


@dataclass
class _Row:
    """A posts table row, column names as stored."""

    id: int
    titulo: str
    img: str
    descripcion: str
    likes: int | None = 0

    def as_mapping(self) -> dict:
        return {
            "id": self.id,
            "titulo": self.titulo,
            "img": self.img,
            "descripcion": self.descripcion,
            "likes": self.likes,
        }


class InMemoryPostStore:
    """In-memory implementation of PostStore.

    Thread safety:
        Uses an asyncio lock. Safe to use from multiple coroutines on
        one event loop.

    Example:
        >>> store = InMemoryPostStore()
        >>> await store.connect()
        >>> post = await store.create_post("A", "http://x", "d")
        >>> post.id
        1
    """

    def __init__(self) -> None:
        self._rows: dict[int, _Row] = {}
        self._next_id = 1
        self._connected = False
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        """Connect (no-op for in-memory)."""
        self._connected = True
        logger.debug("InMemoryPostStore connected")

    async def close(self) -> None:
        """Close and clear all data."""
        self._connected = False
        self._rows.clear()
        logger.debug("InMemoryPostStore closed")

    async def ping(self) -> bool:
        return self._connected

    def _check_connected(self) -> None:
        if not self._connected:
            raise StorageError("In-memory store is not connected")

    async def list_posts(self) -> list[Post]:
        self._check_connected()
        async with self._lock:
            rows = sorted(self._rows.values(), key=lambda r: r.id, reverse=True)
            return [post_from_row(row.as_mapping()) for row in rows]

    async def create_post(self, titulo: str, url: str, descripcion: str) -> Post:
        self._check_connected()
        async with self._lock:
            row = _Row(id=self._next_id, titulo=titulo, img=url, descripcion=descripcion)
            self._rows[row.id] = row
            self._next_id += 1
            return post_from_row(row.as_mapping())

    async def like_post(self, post_id: int) -> Post | None:
        self._check_connected()
        async with self._lock:
            row = self._rows.get(post_id)
            if row is None:
                return None
            row.likes = (row.likes or 0) + 1
            return post_from_row(row.as_mapping())

    async def delete_post(self, post_id: int) -> Post | None:
        self._check_connected()
        async with self._lock:
            row = self._rows.pop(post_id, None)
            return post_from_row(row.as_mapping()) if row is not None else None

    # --- Testing helpers ---

    def insert_raw(
        self,
        titulo: str,
        img: str,
        descripcion: str,
        likes: int | None = None,
    ) -> int:
        """Insert a row directly, e.g. with a null likes column.

        Returns:
            The new row id
        """
        row = _Row(
            id=self._next_id, titulo=titulo, img=img, descripcion=descripcion, likes=likes
        )
        self._rows[row.id] = row
        self._next_id += 1
        return row.id

    def raw_likes(self, post_id: int) -> int | None:
        """Stored likes value for a row, bypassing the null-as-zero mapping."""
        return self._rows[post_id].likes

    def __len__(self) -> int:
        return len(self._rows)

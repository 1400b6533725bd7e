"""
PostgreSQL backend for PostWall.

Database wraps a process-wide asyncpg connection pool; PostgresPostStore
holds the four post queries and runs each one as a single statement.

Invariants:
    - The pool is created once by connect() and released by close()
    - Parameters are always passed positionally ($1, $2, ...), never interpolated
    - Driver and network failures surface as StorageError
    - No caching, retries or batching

Table schema:
    posts:
        - id SERIAL PRIMARY KEY
        - titulo VARCHAR(25)
        - img VARCHAR(1000)
        - descripcion VARCHAR(255)
        - likes INTEGER NOT NULL DEFAULT 0
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import asyncpg

from ..config import Settings
from ..errors import StorageError
from ..models import Post, post_from_row

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS posts (
        id SERIAL PRIMARY KEY,
        titulo VARCHAR(25),
        img VARCHAR(1000),
        descripcion VARCHAR(255),
        likes INTEGER NOT NULL DEFAULT 0
    )
"""

LIST_POSTS_SQL = """
    SELECT id, titulo, img, descripcion, likes
    FROM posts
    ORDER BY id DESC
"""

CREATE_POST_SQL = """
    INSERT INTO posts (titulo, img, descripcion, likes)
    VALUES ($1, $2, $3, 0)
    RETURNING id, titulo, img, descripcion, likes
"""

# COALESCE covers rows written before likes had a NOT NULL default.
LIKE_POST_SQL = """
    UPDATE posts
    SET likes = COALESCE(likes, 0) + 1
    WHERE id = $1
    RETURNING id, titulo, img, descripcion, likes
"""

DELETE_POST_SQL = """
    DELETE FROM posts
    WHERE id = $1
    RETURNING id, titulo, img, descripcion, likes
"""

# Range of the SERIAL (int4) id column; no row can hold an id outside it.
SERIAL_ID_MIN = -(2**31)
SERIAL_ID_MAX = 2**31 - 1

# Failures that mean "the database did not do what we asked".
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


def _is_serial_id(post_id: int) -> bool:
    return SERIAL_ID_MIN <= post_id <= SERIAL_ID_MAX


class Database:
    """Process-wide asyncpg connection pool.

    Idle connections are closed after `idle_lifetime` seconds, so a quiet
    process does not hold server connections open.

    Example:
        >>> db = Database.from_settings(Settings())
        >>> await db.connect()
        >>> rows = await db.fetch("SELECT id FROM posts WHERE likes > $1", 10)
        >>> await db.close()
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        database: str,
        min_size: int = 0,
        max_size: int = 10,
        idle_lifetime: float = 300.0,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.database = database
        self.min_size = min_size
        self.max_size = max_size
        self.idle_lifetime = idle_lifetime
        self._password = password
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        """Create from service settings."""
        return cls(
            host=settings.db_host,
            port=settings.db_port,
            user=settings.db_user,
            password=settings.db_pass.get_secret_value(),
            database=settings.db_database,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            idle_lifetime=settings.db_pool_idle_lifetime,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}/{self.database}"

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def connect(self) -> None:
        """Create the connection pool.

        Raises:
            StorageError: If the server cannot be reached
        """
        if self._pool is not None:
            return

        logger.info(
            f"Opening PostgreSQL pool to {self.endpoint} "
            f"(min={self.min_size}, max={self.max_size})"
        )
        try:
            self._pool = await asyncpg.create_pool(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self._password,
                database=self.database,
                min_size=self.min_size,
                max_size=self.max_size,
                max_inactive_connection_lifetime=self.idle_lifetime,
            )
        except _DRIVER_ERRORS as e:
            raise StorageError(f"Failed to connect to {self.endpoint}: {e}") from e

    async def close(self) -> None:
        """Close the pool, waiting for checked-out connections."""
        if self._pool is None:
            return

        logger.info(f"Closing PostgreSQL pool to {self.endpoint}")
        pool, self._pool = self._pool, None
        await pool.close()

    def _require_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise StorageError("Database pool is not connected")
        return self._pool

    async def _run(self, call: Callable[[], Awaitable[T]], query: str) -> T:
        try:
            return await call()
        except _DRIVER_ERRORS as e:
            raise StorageError(f"Query failed ({' '.join(query.split())[:60]}): {e}") from e

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Run a query and return all rows."""
        pool = self._require_pool()
        return await self._run(lambda: pool.fetch(query, *args), query)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """Run a query and return the first row, or None."""
        pool = self._require_pool()
        return await self._run(lambda: pool.fetchrow(query, *args), query)

    async def fetchval(self, query: str, *args: Any) -> Any:
        """Run a query and return the first column of the first row."""
        pool = self._require_pool()
        return await self._run(lambda: pool.fetchval(query, *args), query)

    async def execute(self, query: str, *args: Any) -> str:
        """Run a statement and return its status tag."""
        pool = self._require_pool()
        return await self._run(lambda: pool.execute(query, *args), query)


class PostgresPostStore:
    """PostStore backed by the posts table.

    Attributes:
        database: Pooled database connection
        create_schema: Create the posts table on connect() if missing
    """

    def __init__(self, database: Database, create_schema: bool = False) -> None:
        self.database = database
        self.create_schema = create_schema

    async def connect(self) -> None:
        await self.database.connect()
        if self.create_schema:
            await self.database.execute(SCHEMA_SQL)
            logger.info("Ensured posts table exists")

    async def close(self) -> None:
        await self.database.close()

    async def ping(self) -> bool:
        try:
            return await self.database.fetchval("SELECT 1") == 1
        except StorageError:
            logger.warning("Database ping failed", exc_info=True)
            return False

    async def list_posts(self) -> list[Post]:
        rows = await self.database.fetch(LIST_POSTS_SQL)
        return [post_from_row(row) for row in rows]

    async def create_post(self, titulo: str, url: str, descripcion: str) -> Post:
        row = await self.database.fetchrow(CREATE_POST_SQL, titulo, url, descripcion)
        if row is None:
            raise StorageError("INSERT ... RETURNING produced no row")
        return post_from_row(row)

    async def like_post(self, post_id: int) -> Post | None:
        if not _is_serial_id(post_id):
            return None
        row = await self.database.fetchrow(LIKE_POST_SQL, post_id)
        return post_from_row(row) if row is not None else None

    async def delete_post(self, post_id: int) -> Post | None:
        if not _is_serial_id(post_id):
            return None
        row = await self.database.fetchrow(DELETE_POST_SQL, post_id)
        return post_from_row(row) if row is not None else None

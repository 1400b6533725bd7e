"""
Request/response models for PostWall.

The posts table stores the image address in an `img` column while clients
see it as `url`. post_from_row() is the only place that translation happens;
every store implementation builds its results through it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

# Fields a create request must carry, in the order they are reported missing.
REQUIRED_CREATE_FIELDS = ("titulo", "url", "descripcion")


class Post(BaseModel):
    """A post as exposed over HTTP."""

    id: int
    titulo: str | None = None
    url: str | None = Field(None, description="Image URL (stored as `img`)")
    descripcion: str | None = None
    likes: int = Field(0, ge=0)


class PostCreate(BaseModel):
    """Request to create a post.

    Fields are optional at parse time so that a missing field yields the
    service's own 400 response instead of a framework validation error.
    """

    titulo: str | None = Field(None, description="Post title")
    url: str | None = Field(None, description="Image URL")
    descripcion: str | None = Field(None, description="Post description")

    def missing_fields(self) -> list[str]:
        """Names of required fields that are absent or empty."""
        return [name for name in REQUIRED_CREATE_FIELDS if not getattr(self, name)]


class DeleteResult(BaseModel):
    """Response for a deleted post."""

    message: str
    post: Post


class ErrorBody(BaseModel):
    """Error response."""

    error: str
    error_code: str
    details: dict[str, Any] | None = None


def post_from_row(row: Mapping[str, Any]) -> Post:
    """Build a Post from a posts table row.

    Accepts asyncpg Records and plain dicts. A null `likes` is reported as 0.
    """
    return Post(
        id=row["id"],
        titulo=row["titulo"],
        url=row["img"],
        descripcion=row["descripcion"],
        likes=row["likes"] or 0,
    )

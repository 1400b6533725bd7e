"""
API routes for PostWall.

Each handler issues exactly one store call and lets failures propagate as
PostWallError subclasses; the app's exception handlers turn those into
JSON error responses (see app.py).
"""

import logging

from fastapi import APIRouter, Depends, Request

from .db import PostStore
from .errors import PostNotFoundError, ValidationError
from .models import DeleteResult, ErrorBody, Post, PostCreate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Posts"])

_ERRORS = {500: {"model": ErrorBody, "description": "Storage failure"}}
_NOT_FOUND = {404: {"model": ErrorBody, "description": "Post not found"}}


# --- Dependencies ---


def get_store(request: Request) -> PostStore:
    """Get post store from app state."""
    return request.app.state.store


# --- Post Routes ---


@router.get("/posts", response_model=list[Post], responses=_ERRORS)
async def list_posts(store: PostStore = Depends(get_store)):
    """List all posts, newest first."""
    return await store.list_posts()


@router.post(
    "/posts",
    response_model=Post,
    status_code=201,
    responses={400: {"model": ErrorBody, "description": "Missing fields"}, **_ERRORS},
)
async def create_post(
    body: PostCreate | None = None,
    store: PostStore = Depends(get_store),
):
    """
    Create a post.

    `titulo`, `url` and `descripcion` are all required and must be
    non-empty. The new post starts with zero likes.
    """
    body = body or PostCreate()
    missing = body.missing_fields()
    if missing:
        raise ValidationError(missing=missing)

    post = await store.create_post(body.titulo, body.url, body.descripcion)
    logger.info(f"Created post {post.id}")
    return post


@router.put("/posts/like/{post_id}", response_model=Post, responses={**_NOT_FOUND, **_ERRORS})
async def like_post(post_id: int, store: PostStore = Depends(get_store)):
    """Add one like to a post."""
    post = await store.like_post(post_id)
    if post is None:
        raise PostNotFoundError(post_id)
    return post


@router.delete("/posts/{post_id}", response_model=DeleteResult, responses={**_NOT_FOUND, **_ERRORS})
async def delete_post(post_id: int, store: PostStore = Depends(get_store)):
    """Delete a post and return what it contained."""
    post = await store.delete_post(post_id)
    if post is None:
        raise PostNotFoundError(post_id)
    logger.info(f"Deleted post {post_id}")
    return DeleteResult(message="Post eliminado", post=post)

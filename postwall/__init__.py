"""
PostWall - HTTP backend for a wall of posts with like counters.

A thin FastAPI service over a single PostgreSQL table:
- GET    /posts           list posts, newest first
- POST   /posts           create a post
- PUT    /posts/like/{id} increment a post's like counter
- DELETE /posts/{id}      delete a post

Architecture:
    ┌─────────────┐     ┌─────────────┐     ┌─────────────┐     ┌──────────┐
    │   Client    │────▶│   Routes    │────▶│  PostStore  │────▶│ asyncpg  │
    │   (HTTP)    │     │  (FastAPI)  │     │  (4 queries)│     │   pool   │
    └─────────────┘     └─────────────┘     └─────────────┘     └──────────┘

Invariants:
    - Every request performs exactly one storage round trip
    - The storage engine owns all state; nothing is cached between requests
    - The `img` column is always exposed as `url`
"""

from .app import create_app
from .models import DeleteResult, Post, PostCreate

__version__ = "1.0.0"

__all__ = ["__version__", "create_app", "Post", "PostCreate", "DeleteResult"]

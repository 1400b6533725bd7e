"""
PostWall Test Suite.

This package contains:
- unit/: Unit tests (no external dependencies, asyncpg mocked)
- integration/: HTTP API tests over the in-memory store
- e2e/: End-to-end tests (real PostgreSQL, opt-in)
"""

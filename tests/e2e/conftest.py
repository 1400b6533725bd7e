"""
E2E test fixtures for PostWall against a real PostgreSQL server.

These tests need a reachable database configured through the usual
DB_HOST/DB_USER/DB_PASS/DB_DATABASE/DB_PORT variables.
"""

import pytest

from postwall.config import Settings


@pytest.fixture
def pg_settings() -> Settings:
    """Settings pointing at the test database, with schema bootstrap on."""
    return Settings(_env_file=None, store_backend="postgres", db_create_schema=True)

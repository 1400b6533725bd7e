"""
Configuration for PostWall.

Uses pydantic-settings for environment variable loading. The database
variables keep the names of the deployment this service replaces
(DB_HOST, DB_USER, DB_PASS, DB_DATABASE, DB_PORT), and a `.env` file in the
working directory is read when present.
"""

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration loaded from environment."""

    # PostgreSQL connection
    db_host: str = Field(default="localhost", description="PostgreSQL host")
    db_user: str = Field(default="postgres", description="PostgreSQL user")
    db_pass: SecretStr = Field(default=SecretStr(""), description="PostgreSQL password")
    db_database: str = Field(default="likeme", description="PostgreSQL database name")
    db_port: int = Field(default=5432, description="PostgreSQL port")

    # Connection pool
    db_pool_min_size: int = Field(
        default=0,
        ge=0,
        description="Min pooled connections (0 = connect on first query)",
    )
    db_pool_max_size: int = Field(default=10, ge=1, description="Max pooled connections")
    db_pool_idle_lifetime: float = Field(
        default=300.0,
        ge=0,
        description="Seconds before an idle connection is closed (0 = never)",
    )
    db_create_schema: bool = Field(
        default=False, description="Create the posts table at startup if missing"
    )

    store_backend: Literal["postgres", "memory"] = Field(
        default="postgres", description="Post storage backend"
    )

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, description="Bind port")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # Logging
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR")
    log_format: Literal["text", "json"] = Field(default="text", description="Log format")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def db_endpoint(self) -> str:
        """Database address for log messages (no credentials)."""
        return f"{self.db_host}:{self.db_port}/{self.db_database}"

"""
Configuration Management

Centralized configuration using Pydantic Settings.
Every field can be overridden with a ``MULTISQL_`` environment variable
or a ``.env`` file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Driver layer settings."""

    model_config = SettingsConfigDict(
        env_prefix="MULTISQL_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Streaming
    prefetch_size: int = Field(default=1000, ge=1, description="Rows fetched per cursor round-trip")

    # Staged files
    temp_prefix: str = Field(default="multisql-")
    cleanup_stale_temp: bool = Field(default=True)
    stale_temp_seconds: int = Field(default=86400, ge=0)

    # Remote fetch
    http_timeout: float = Field(default=30.0, gt=0)

    # Display
    locale: str = Field(default="en")

    # Logging
    log_level: str = Field(default="INFO")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()

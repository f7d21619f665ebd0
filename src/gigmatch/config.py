"""Configuration settings using pydantic-settings for environment variable loading."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Reads a local .env file as well; real environment variables win.
    API credentials are optional so the offline commands (profile, match
    against injected sources) work without them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Event sources
    ticketmaster_api_key: str | None = None

    # Listening history
    youtube_access_token: str | None = None
    spotify_client_id: str | None = None
    spotify_client_secret: str | None = None

    # Nearest-matches search
    search_radius_km: int = Field(default=1000, gt=0)
    genre_result_size: int = Field(default=30, gt=0)
    artist_result_size: int = Field(default=3, gt=0)
    artist_search_limit: int = Field(default=5, ge=0)
    max_results: int = Field(default=15, gt=0)
    quality_threshold: int = Field(default=75, ge=0, le=100)

    # Fan-out
    max_concurrency: int = Field(default=5, gt=0)
    request_delay: float = Field(default=0.2, ge=0.0)
    request_timeout: float = Field(default=30.0, gt=0.0)

    # In-memory response cache
    cache_ttl_seconds: int = Field(default=3600, gt=0)
    cache_max_size: int = Field(default=1024, gt=0)

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()

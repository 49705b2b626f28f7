"""Configuration settings for postsync."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "https://dev.to/api"


def get_postsync_home() -> Path:
    """Directory holding the local cache. POSTSYNC_HOME overrides ~/.postsync."""
    override = os.environ.get("POSTSYNC_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".postsync"


class Settings(BaseSettings):
    """Settings loaded from POSTSYNC_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="POSTSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Local cache
    db_path: Optional[Path] = None  # Defaults to <home>/cache.db

    # Remote read API
    api_base_url: str = DEFAULT_API_BASE_URL
    list_per_page: int = 100
    request_timeout: float = 10.0

    # Connectivity
    probe_url: Optional[str] = None  # Defaults to api_base_url
    connectivity_cache_ttl: float = 30.0
    probe_interval: float = 15.0

    # Queue replay
    max_attempts: int = 5

    log_level: str = "WARNING"

    def resolved_db_path(self) -> Path:
        return self.db_path or get_postsync_home() / "cache.db"

    def resolved_probe_url(self) -> str:
        return self.probe_url or self.api_base_url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

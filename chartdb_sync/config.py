"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - Sync is enabled only with a non-empty sync_api_url; sync_enabled can
      switch it off but never on without an endpoint
    - sync_api_url is stored without a trailing slash

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all settings: with no environment the app runs
      local-only (sync disabled, SQLite catalog in the working directory)
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class SyncConfig:
    """What the remote sync client needs: endpoint and switch."""
    api_url: str
    enabled: bool

    @property
    def is_enabled(self) -> bool:
        return self.enabled and bool(self.api_url)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Remote sync
    sync_api_url: str = ""
    sync_enabled: bool | None = None
    sync_debounce_ms: int = 2000
    sync_timeout_seconds: float = 30.0

    @field_validator("sync_api_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    # Startup
    default_diagram_id: str | None = None

    # Local catalog / reference endpoint storage
    database_url: str = "sqlite+aiosqlite:///chartdb.db"
    database_pool_size: int = 20
    database_max_overflow: int = 10

    # API (reference sync endpoint)
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def sync_config(self) -> SyncConfig:
        enabled = bool(self.sync_api_url)
        if self.sync_enabled is not None:
            enabled = enabled and self.sync_enabled
        return SyncConfig(api_url=self.sync_api_url, enabled=enabled)


@lru_cache
def get_settings() -> Settings:
    return Settings()

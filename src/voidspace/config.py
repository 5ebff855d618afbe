"""Application settings via pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables with VOIDSPACE_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="VOIDSPACE_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Persistence ---
    storage_backend: Literal["memory", "file", "redis", "database"] = "file"
    storage_dir: str = ".voidspace"
    namespace_prefix: str = "voidspace"
    redis_url: str = "redis://localhost:6379/0"
    database_url: str = "sqlite:///./voidspace.db"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()

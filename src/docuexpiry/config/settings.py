"""Settings module using pydantic-settings for configuration management."""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service Configuration
    service_name: str = Field(default="docuexpiry")
    environment: str = Field(default="development")
    port: int = Field(default=8010)
    host: str = Field(default="0.0.0.0")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Database Configuration
    database_url: str = Field(default="sqlite+aiosqlite:///./docuexpiry.db")

    # Expiry Configuration
    expiring_window_days: int = Field(default=30, ge=1)

    # Upload Token Configuration
    upload_token_secret: str = Field(default="change-me-in-production")
    upload_token_ttl_seconds: int = Field(default=3600, ge=1)
    upload_max_size_bytes: int = Field(default=25 * 1024 * 1024)  # 25MB cap
    upload_callback_secret: Optional[str] = Field(default=None)

    # Logging
    log_level: str = Field(default="INFO")

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings_cache() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()

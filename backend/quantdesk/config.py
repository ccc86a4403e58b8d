"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql://localhost/market_terminal"

    # Polygon API
    polygon_api_key: str = ""
    polygon_base_url: str = "https://api.polygon.io"
    request_timeout_seconds: float = 15.0

    # Outcome evaluation
    batch_limit: int = 50
    min_age_hours: float = 1.0
    expiry_days: int = 7
    check_interval_minutes: int = 60
    scheduler_enabled: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

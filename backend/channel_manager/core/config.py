"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Channel Manager"
    debug: bool = False
    api_v1_prefix: str = "/v1"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:5173"

    # Database
    database_url: str

    # Firebase Auth
    firebase_project_id: str
    google_application_credentials: Optional[str] = None

    # Availability horizon policy
    default_horizon_days: int = 30
    max_horizon_days: int = 366

    # Comma-separated booking sources that owners may delete (synced OTA rows are read-only)
    deletable_booking_sources: str = "manual,web"

    # Outbound booking webhook (disabled when unset)
    booking_webhook_url: Optional[str] = None
    webhook_timeout_seconds: float = 10.0

    @property
    def deletable_sources(self) -> tuple[str, ...]:
        """Parsed deletable booking sources."""
        return tuple(
            s.strip().lower() for s in self.deletable_booking_sources.split(",") if s.strip()
        )

    @property
    def origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def async_database_url(self) -> str:
        """Database URL forced onto the asyncpg driver."""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()

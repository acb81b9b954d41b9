"""
Startup environment validation.

Checks the configuration once before the app is built and refuses to start
(exit 1) when anything is missing or inconsistent. Every problem found is
reported in one go so a broken deploy can be fixed in a single pass.
"""

import os
import sys
from typing import Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from channel_manager.models.enums import BookingSource


class ProductionSettings(BaseSettings):
    """
    Strict view of the environment used only for startup checks.

    Unlike ``Settings`` it has no default for CORS origins and rejects unknown
    keys in ``.env``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="forbid",  # a typo in .env is an error, not a silent default
    )

    # Required
    database_url: str
    firebase_project_id: str
    allowed_origins: str

    google_application_credentials: Optional[str] = None

    app_name: str = "Channel Manager"
    debug: bool = False
    api_v1_prefix: str = "/v1"
    log_level: str = "INFO"

    # Booking policy
    default_horizon_days: int = 30
    max_horizon_days: int = 366
    deletable_booking_sources: str = "manual,web"

    # Outbound webhook
    booking_webhook_url: Optional[str] = None
    webhook_timeout_seconds: float = 10.0


def find_problems(settings: ProductionSettings) -> list[str]:
    """Cross-field checks pydantic cannot express on single fields."""
    problems: list[str] = []

    origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
    if not settings.debug and "*" in origins:
        problems.append(
            "ALLOWED_ORIGINS contains the wildcard (*) outside debug mode; list the allowed domains"
        )

    known_sources = {s.value for s in BookingSource}
    deletable = [
        s.strip().lower() for s in settings.deletable_booking_sources.split(",") if s.strip()
    ]
    unknown = [s for s in deletable if s not in known_sources]
    if unknown:
        problems.append(
            f"DELETABLE_BOOKING_SOURCES has unknown sources {unknown}; allowed: {sorted(known_sources)}"
        )

    if settings.max_horizon_days < 1:
        problems.append("MAX_HORIZON_DAYS must be at least 1")
    elif not 1 <= settings.default_horizon_days <= settings.max_horizon_days:
        problems.append(
            f"DEFAULT_HORIZON_DAYS must be between 1 and MAX_HORIZON_DAYS ({settings.max_horizon_days})"
        )

    if settings.booking_webhook_url and not settings.booking_webhook_url.startswith(
        ("http://", "https://")
    ):
        problems.append("BOOKING_WEBHOOK_URL must start with http:// or https://")
    if settings.webhook_timeout_seconds <= 0:
        problems.append("WEBHOOK_TIMEOUT_SECONDS must be positive")

    credentials_path = settings.google_application_credentials
    if credentials_path and not os.path.exists(credentials_path):
        problems.append(f"Firebase credentials file not found: {credentials_path}")

    if not settings.database_url.startswith("postgresql"):
        # The overlap guard is a PostgreSQL exclusion constraint
        problems.append(
            "DATABASE_URL must be a PostgreSQL connection string (postgresql:// or postgresql+asyncpg://)"
        )

    return problems


def validate_environment() -> ProductionSettings:
    """
    Validate the environment before the FastAPI app is created.

    Raises:
        SystemExit: exit code 1 when the configuration is unusable
    """
    try:
        settings = ProductionSettings()
    except ValidationError as e:
        print("❌ FATAL: Environment validation failed", file=sys.stderr)
        print("\nMissing or invalid environment variables:", file=sys.stderr)
        for error in e.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            print(f"   • {field}: {error['msg']}", file=sys.stderr)
        sys.exit(1)

    problems = find_problems(settings)
    if problems:
        print("❌ FATAL: Invalid configuration", file=sys.stderr)
        for problem in problems:
            print(f"   • {problem}", file=sys.stderr)
        print("\nThe application cannot start with invalid configuration.", file=sys.stderr)
        sys.exit(1)

    print("✅ Environment validation passed")
    print(f"   App: {settings.app_name} (debug={settings.debug})")
    print(f"   Horizon: default {settings.default_horizon_days}, max {settings.max_horizon_days} nights")
    print(f"   Deletable sources: {settings.deletable_booking_sources}")
    print(f"   Webhook: {'enabled' if settings.booking_webhook_url else 'disabled'}")
    print(f"   CORS Origins: {settings.allowed_origins}")

    return settings


if __name__ == "__main__":
    validate_environment()

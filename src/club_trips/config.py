"""Application configuration.

Configuration is loaded from environment variables using pydantic-settings.
Secrets (the officer passcode, service account keys) should be provided via
environment variables, not committed config files.

## Required Environment Variables

- OFFICER_SECRET: Shared passcode officers send with mutating requests
- SPREADSHEET_ID: Google Sheets spreadsheet holding the Trips/Requests tables
- CALENDAR_ID: Google Calendar that mirrors the trips

## Optional Environment Variables

- GOOGLE_SERVICE_ACCOUNT_FILE: Path to a service account JSON key
- GOOGLE_SERVICE_ACCOUNT_JSON: Inline service account JSON key
- SITE_BASE_URL: Public site URL used to build join links
- TIMEZONE: IANA display timezone (default: America/New_York)
- DEBUG: Enable debug mode (default: false)

## Example .env file

```
OFFICER_SECRET=a-long-shared-passcode
SPREADSHEET_ID=1AbCdEfGhIjKlMnOpQrStUvWxYz
CALENDAR_ID=club@group.calendar.google.com
GOOGLE_SERVICE_ACCOUNT_FILE=/etc/club-trips/service-account.json
SITE_BASE_URL=https://club.example.org
```
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Club Trips"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Security
    officer_secret: str = Field(
        ...,
        min_length=8,
        description="Shared passcode required for officer actions",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="CORS allowed origins",
    )
    site_base_url: str = Field(
        default="http://localhost:8000",
        description="Public site URL used to build trip join links",
    )

    # Google APIs
    spreadsheet_id: str = Field(..., description="Google Sheets spreadsheet ID")
    calendar_id: str = Field(..., description="Google Calendar ID for trip events")
    google_service_account_file: str | None = None
    google_service_account_json: str | None = None
    google_scopes: list[str] = Field(
        default=[
            "https://www.googleapis.com/auth/spreadsheets",
            "https://www.googleapis.com/auth/calendar.events",
        ],
        description="OAuth scopes requested for the service account",
    )

    # Trips
    timezone: str = Field(
        default="America/New_York",
        description="IANA timezone officers enter trip times in",
    )
    public_grace_days: int = Field(default=7, ge=0, le=365)

    # Calendar sync
    sync_past_days: int = Field(default=30, ge=0, le=3650)
    sync_future_days: int = Field(default=365, ge=1, le=3650)
    auto_sync: bool = True  # Reconcile after each trip mutation

    @field_validator("site_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Join links are built as f"{site_base_url}/trips.html"."""
        return str(v).rstrip("/")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names the system tz database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def tz(self) -> ZoneInfo:
        """Display timezone as a tzinfo object."""
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
    ```python
    get_settings.cache_clear()
    ```
    """
    return Settings()


def get_settings_uncached() -> Settings:
    """Get fresh settings without caching.

    Useful for testing when environment variables change.
    """
    return Settings()

"""Configuration management for geonudge."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Configuration
    sqlite_db_path: str = Field(default="data/geonudge.db", description="SQLite file backing the key-value store")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name")

    # Notification Configuration
    notification_url: str | None = Field(
        default=None, description="Endpoint that accepts push notification requests (title/body/data JSON)"
    )
    notification_api_key: str | None = Field(default=None, description="API key sent with notification requests")

    # Reverse Geocoding Configuration
    geocoding_enabled: bool = Field(default=True, description="Resolve addresses for new task locations")
    geocoder_url: str = Field(
        default="https://nominatim.openstreetmap.org/reverse",
        description="Nominatim-compatible reverse geocoding endpoint",
    )
    geocoder_user_agent: str = Field(default="geonudge/0.1.0", description="User-Agent sent to the geocoder")

    # Location Feed Configuration
    location_permission_granted: bool = Field(
        default=True, description="Whether the host granted foreground location access"
    )
    location_min_interval_ms: int = Field(default=1000, description="Minimum time between accepted fixes")
    location_min_distance_m: float = Field(default=0.5, description="Minimum movement between accepted fixes")

    # Geofence Configuration
    arrival_radius_m: float = Field(default=1609.34, description="Geofence radius around each task location")
    favorite_match_decimals: int = Field(
        default=5, description="Decimal places used when matching a coordinate against favorites"
    )


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: int = 10

    # HTTP Status Codes
    HTTP_BAD_REQUEST: int = 400
    HTTP_FORBIDDEN: int = 403
    HTTP_NOT_FOUND: int = 404
    HTTP_SERVER_ERROR: int = 500
    HTTP_SERVICE_UNAVAILABLE: int = 503

    # Geodesy
    EARTH_RADIUS_METERS: float = 6_371_000.0
    ARRIVAL_RADIUS_METERS: float = 1609.34  # one mile

    # Persistence keys (payload format is part of the on-disk contract)
    TASKS_STORAGE_KEY: str = "Tasks"
    FAVORITES_STORAGE_KEY: str = "favoriteLocations"

    # Notification content
    PROXIMITY_NOTIFICATION_TITLE: str = "You’re close to a task location!"

    # Display
    NO_LOCATION_LABEL: str = "No location set"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()

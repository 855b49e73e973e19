"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Persistence
    trip_data_path: str | None = None

    # External APIs
    google_maps_api_key: str = ""
    navitime_api_key: str = ""
    navitime_api_host: str = "navitime-route-totalnavi.p.rapidapi.com"

    # Day defaults
    default_day_start: str = "09:00"
    default_city: str = "Tokyo"

    # Placeholder coordinate for unresolved places (Tokyo)
    default_lat: float = 35.6762
    default_lng: float = 139.6503

    # Scheduling (minutes)
    default_travel_buffer_min: int = 30
    default_activity_duration_min: int = 60
    time_rounding_min: int = 5

    # Travel-segment selection (minutes)
    walk_max_min: int = 45
    close_match_min: int = 15

    # Route optimization
    optimize_min_activities: int = 2
    return_to_origin: bool = True

    # Provider timeouts (milliseconds)
    provider_hard_timeout_ms: int = 4000

    # Retry jitter (milliseconds)
    provider_retry_count: int = 1
    retry_jitter_min_ms: int = 200
    retry_jitter_max_ms: int = 500

    # Circuit breaker
    circuit_breaker_failures: int = 5
    circuit_breaker_window_sec: int = 60
    circuit_breaker_half_open_sec: int = 30

    # Cache TTLs (seconds)
    place_cache_ttl_seconds: int = 30 * 24 * 3600
    weather_cache_ttl_seconds: int = 3 * 3600

    # Weather (Open-Meteo, keyless)
    weather_base_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_timezone: str = "Asia/Tokyo"
    weather_horizon_days: int = 16


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

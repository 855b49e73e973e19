"""Common types and enums shared across all models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from tripboard.app.config import get_settings


class Coordinates(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


def default_coordinates() -> Coordinates:
    """Placeholder location used when a place could not be resolved."""
    settings = get_settings()
    return Coordinates(lat=settings.default_lat, lng=settings.default_lng)


class TravelMode(str, Enum):
    """Travel mode of a segment between two stops."""

    WALKING = "WALKING"
    TRANSIT = "TRANSIT"
    DRIVING = "DRIVING"
    TRAIN = "TRAIN"
    BUS = "BUS"


class ActivityType(str, Enum):
    """Type of activity."""

    sightseeing = "sightseeing"
    food = "food"
    travel = "travel"
    shopping = "shopping"
    leisure = "leisure"


class Provenance(BaseModel):
    """Provenance metadata for provider results."""

    source: str  # Provider-specific identifier (e.g., "provider.navitime")
    ref_id: str | None = None
    source_url: str | None = None
    fetched_at: datetime
    cache_hit: bool | None = None

"""Provider result models - external data shapes."""

from datetime import date

from pydantic import BaseModel, Field

from tripboard.app.models.common import Coordinates, Provenance, TravelMode
from tripboard.app.models.trip import TravelSegment


class TravelEstimate(BaseModel):
    """Travel-time estimate for one leg from a single provider."""

    mode: TravelMode
    duration_seconds: int
    duration_text: str
    distance_text: str | None = None
    fare_amount: float | None = None
    provenance: Provenance | None = None


class PlaceResult(BaseModel):
    """Canonical place data from a text search."""

    name: str
    place_id: str | None = None
    location: Coordinates
    photo_reference: str | None = None
    rating: float | None = None
    user_ratings_total: int | None = None
    address: str | None = None


class RouteResult(BaseModel):
    """Output of route optimization: ordering plus per-leg segments."""

    order: list[int]
    segments: list[TravelSegment] = Field(default_factory=list)
    total_duration_seconds: int = 0
    total_duration_text: str = "0m"


class DayForecast(BaseModel):
    """Daily weather forecast for one trip day (Open-Meteo)."""

    date: date
    max_temp_c: float | None = None
    min_temp_c: float | None = None
    weather_code: int | None = None  # WMO interpretation code
    description: str = "Unknown"
    precipitation_probability: int | None = None  # percent, 0-100
    provenance: Provenance | None = None

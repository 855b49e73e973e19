"""FastAPI dependencies: trip store and provider wiring."""

from functools import lru_cache

from tripboard.app.adapters.places import photo_url
from tripboard.app.config import get_settings
from tripboard.app.db.repositories import InMemoryTripRepository, JsonFileTripRepository
from tripboard.app.db.seed import starter_trip
from tripboard.app.db.store import TripStore
from tripboard.app.routing.assembly import TravelProviders
from tripboard.app.services.planning import PhotoUrlBuilder
from tripboard.app.services.providers import (
    ForecastLookup,
    Geocoder,
    PlaceSearch,
    build_forecast_lookup,
    build_geocoder,
    build_place_search,
    build_travel_providers,
)
from tripboard.app.tools.executor import ProviderExecutor
from tripboard.app.utils.logging import StructuredProviderLogger
from tripboard.app.utils.metrics import PrometheusProviderMetrics


@lru_cache
def get_store() -> TripStore:
    """Process-wide trip store (JSON file if TRIP_DATA_PATH is set)."""
    settings = get_settings()
    if settings.trip_data_path:
        return TripStore(JsonFileTripRepository(settings.trip_data_path))
    return TripStore(InMemoryTripRepository(starter_trip()))


@lru_cache
def get_executor() -> ProviderExecutor:
    return ProviderExecutor(
        metrics=PrometheusProviderMetrics(),
        logger=StructuredProviderLogger(),
    )


def get_travel_providers() -> TravelProviders:
    return build_travel_providers(get_settings(), get_executor())


def get_place_search() -> PlaceSearch | None:
    settings = get_settings()
    if not settings.google_maps_api_key:
        return None
    return build_place_search(settings, get_executor())


def get_geocoder() -> Geocoder | None:
    settings = get_settings()
    if not settings.google_maps_api_key:
        return None
    return build_geocoder(settings, get_executor())


def get_photo_url_builder() -> PhotoUrlBuilder | None:
    settings = get_settings()
    if not settings.google_maps_api_key:
        return None
    api_key = settings.google_maps_api_key
    return lambda reference: photo_url(reference, api_key)


def get_forecast_lookup() -> ForecastLookup:
    return build_forecast_lookup(get_settings(), get_executor())

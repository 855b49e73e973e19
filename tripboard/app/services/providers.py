"""Wires provider adapters through the executor using application settings."""

import uuid
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from functools import partial

import httpx
from pydantic import BaseModel

from tripboard.app.adapters.directions import fetch_directions
from tripboard.app.adapters.geocoding import geocode
from tripboard.app.adapters.navitime import fetch_transit_route
from tripboard.app.adapters.places import search_place
from tripboard.app.adapters.weather import fetch_daily_forecast
from tripboard.app.config import Settings
from tripboard.app.models.common import Coordinates, TravelMode
from tripboard.app.models.tool_results import DayForecast, PlaceResult, TravelEstimate
from tripboard.app.routing.assembly import TravelEstimator, TravelProviders
from tripboard.app.tools.executor import ProviderConfig, ProviderContext, ProviderExecutor

PlaceSearch = Callable[[str], Awaitable[PlaceResult | None]]
Geocoder = Callable[[str], Awaitable[Coordinates | None]]
ForecastLookup = Callable[[Coordinates, date], Awaitable[DayForecast | None]]


class LegQuery(BaseModel):
    """Payload for one travel-time request."""

    origin: Coordinates
    destination: Coordinates
    departure: datetime


class TextQuery(BaseModel):
    """Payload for place search and geocoding."""

    query: str


class ForecastQuery(BaseModel):
    """Payload for a daily weather forecast."""

    location: Coordinates
    day: date


def _new_trace_id() -> str:
    return f"trace_{uuid.uuid4().hex[:8]}"


def _leg_estimator(
    executor: ProviderExecutor,
    config: ProviderConfig,
    provider: str,
    fetch: Callable[[Coordinates, Coordinates, datetime], Awaitable[TravelEstimate | None]],
) -> TravelEstimator:
    async def call(payload: LegQuery) -> TravelEstimate | None:
        return await fetch(payload.origin, payload.destination, payload.departure)

    async def estimate(
        origin: Coordinates, destination: Coordinates, departure: datetime
    ) -> TravelEstimate | None:
        payload = LegQuery(origin=origin, destination=destination, departure=departure)
        ctx = ProviderContext(trace_id=_new_trace_id(), provider=provider)
        return await executor.execute(ctx, config, call, payload)

    return estimate


def build_travel_providers(
    settings: Settings,
    executor: ProviderExecutor,
    client: httpx.AsyncClient | None = None,
) -> TravelProviders:
    """Build the walking/transit/fallback estimators.

    Providers without a configured API key are left out, so their legs fall
    through to the next option in the selection chain.
    """
    config = ProviderConfig.from_settings(settings)
    providers = TravelProviders()

    if settings.google_maps_api_key:
        directions = partial(fetch_directions, api_key=settings.google_maps_api_key, client=client)
        providers.walking = _leg_estimator(
            executor, config, "directions.walking", partial(directions, TravelMode.WALKING)
        )
        providers.fallback_transit = _leg_estimator(
            executor, config, "directions.transit", partial(directions, TravelMode.TRANSIT)
        )

    if settings.navitime_api_key:
        providers.transit = _leg_estimator(
            executor,
            config,
            "navitime.transit",
            partial(
                fetch_transit_route,
                api_key=settings.navitime_api_key,
                host=settings.navitime_api_host,
                client=client,
            ),
        )

    return providers


def build_place_search(
    settings: Settings,
    executor: ProviderExecutor,
    client: httpx.AsyncClient | None = None,
) -> PlaceSearch:
    """Place text search with a long-lived result cache."""
    config = ProviderConfig.from_settings(settings, cache_ttl_seconds=settings.place_cache_ttl_seconds)

    async def call(payload: TextQuery) -> PlaceResult | None:
        return await search_place(payload.query, api_key=settings.google_maps_api_key, client=client)

    async def search(query: str) -> PlaceResult | None:
        ctx = ProviderContext(trace_id=_new_trace_id(), provider="places.search")
        return await executor.execute(ctx, config, call, TextQuery(query=query.lower().strip()))

    return search


def build_geocoder(
    settings: Settings,
    executor: ProviderExecutor,
    client: httpx.AsyncClient | None = None,
) -> Geocoder:
    config = ProviderConfig.from_settings(settings, cache_ttl_seconds=settings.place_cache_ttl_seconds)

    async def call(payload: TextQuery) -> Coordinates | None:
        return await geocode(payload.query, api_key=settings.google_maps_api_key, client=client)

    async def resolve(address: str) -> Coordinates | None:
        ctx = ProviderContext(trace_id=_new_trace_id(), provider="geocoding")
        return await executor.execute(ctx, config, call, TextQuery(query=address))

    return resolve


def build_forecast_lookup(
    settings: Settings,
    executor: ProviderExecutor,
    client: httpx.AsyncClient | None = None,
) -> ForecastLookup:
    """Daily forecast lookup; Open-Meteo needs no key, so it is always wired."""
    config = ProviderConfig.from_settings(settings, cache_ttl_seconds=settings.weather_cache_ttl_seconds)

    async def call(payload: ForecastQuery) -> DayForecast | None:
        return await fetch_daily_forecast(
            payload.location,
            payload.day,
            timezone=settings.weather_timezone,
            base_url=settings.weather_base_url,
            client=client,
        )

    async def lookup(location: Coordinates, day: date) -> DayForecast | None:
        # Rounded so nearby stops of the same day share a cache entry
        rounded = Coordinates(lat=round(location.lat, 2), lng=round(location.lng, 2))
        ctx = ProviderContext(trace_id=_new_trace_id(), provider="weather.open_meteo")
        return await executor.execute(ctx, config, call, ForecastQuery(location=rounded, day=day))

    return lookup

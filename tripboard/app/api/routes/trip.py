"""Trip endpoints - day and activity mutations, route optimization.

Every mutation goes through TripStore.mutate_day, which serializes edits of
the same day and persists the new snapshot once the pure handler returns.
"""

import uuid
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from tripboard.app.api.deps import (
    get_forecast_lookup,
    get_geocoder,
    get_photo_url_builder,
    get_place_search,
    get_store,
    get_travel_providers,
)
from tripboard.app.config import get_settings
from tripboard.app.db.store import DayMutation, DayNotFoundError, TripNotFoundError, TripStore
from tripboard.app.models.common import ActivityType, Coordinates
from tripboard.app.models.tool_results import DayForecast, RouteResult
from tripboard.app.models.trip import Activity, DayPlan, Trip
from tripboard.app.models.violations import Violation
from tripboard.app.routing.assembly import TravelProviders
from tripboard.app.scheduling import mutations
from tripboard.app.scheduling.expenses import (
    ExpenseSummary,
    calculate_day_expenses,
    calculate_trip_expenses,
)
from tripboard.app.services.planning import (
    OptimizeRouteError,
    PhotoUrlBuilder,
    build_activity,
    enrich_activity,
    forecast_for_day,
    optimize_day,
    split_with_places,
)
from tripboard.app.services.providers import ForecastLookup, Geocoder, PlaceSearch
from tripboard.app.utils.metrics import day_mutations_total
from tripboard.app.verification.overlaps import find_overlaps, find_overnight_activities

router = APIRouter(prefix="/trip", tags=["trip"])

Store = Annotated[TripStore, Depends(get_store)]
Places = Annotated[PlaceSearch | None, Depends(get_place_search)]
GeocoderDep = Annotated[Geocoder | None, Depends(get_geocoder)]
PhotoUrls = Annotated[PhotoUrlBuilder | None, Depends(get_photo_url_builder)]


class AddActivityRequest(BaseModel):
    """Request body for adding an activity by name."""

    name: str = Field(..., min_length=1)
    type: ActivityType = ActivityType.sightseeing
    duration_min: int | None = Field(None, gt=0)
    after_id: str | None = None
    at_start: bool = False


class MoveRequest(BaseModel):
    direction: Literal["up", "down"]


class ReorderRequest(BaseModel):
    source_index: int = Field(..., ge=0)
    target_index: int = Field(..., ge=0)


class SplitRequest(BaseModel):
    names: list[str] = Field(..., min_length=1)


class DayUpdateRequest(BaseModel):
    """Partial update of day-level fields."""

    city: str | None = None
    notes: str | None = None
    start_time: str | None = Field(None, pattern=r"^\d{2}:\d{2}$")
    accommodation_name: str | None = None
    accommodation_location: Coordinates | None = None


class OptimizeResponse(BaseModel):
    day: DayPlan
    total_duration: str
    total_duration_seconds: int


class AdvisoriesResponse(BaseModel):
    violations: list[Violation]


class WeatherResponse(BaseModel):
    day_id: str
    forecast: DayForecast | None = None


async def _mutate(store: TripStore, day_id: str, operation: str, mutation: DayMutation) -> DayPlan:
    try:
        day = await store.mutate_day(day_id, mutation)
    except (DayNotFoundError, TripNotFoundError, mutations.ActivityNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    day_mutations_total.labels(operation=operation).inc()
    return day


async def _get_day(store: TripStore, day_id: str) -> DayPlan:
    try:
        return await store.get_day(day_id)
    except (DayNotFoundError, TripNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.get("", response_model=Trip)
async def get_trip(store: Store) -> Trip:
    try:
        return await store.get_trip()
    except TripNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("", response_model=Trip)
async def put_trip(trip: Trip, store: Store) -> Trip:
    """Replace the whole trip snapshot."""
    return await store.put_trip(trip)


@router.get("/expenses")
async def get_trip_expenses(store: Store) -> ExpenseSummary:
    try:
        return calculate_trip_expenses(await store.get_trip())
    except TripNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.post("/days", response_model=Trip, status_code=status.HTTP_201_CREATED)
async def add_day(store: Store) -> Trip:
    day_id = f"day-{uuid.uuid4().hex[:8]}"
    default_city = get_settings().default_city
    return await store.mutate_trip(lambda trip: mutations.add_day(trip, day_id, default_city=default_city))


@router.delete("/days/{day_id}", response_model=Trip)
async def delete_day(day_id: str, store: Store) -> Trip:
    try:
        return await store.mutate_trip(lambda trip: mutations.delete_day(trip, day_id))
    except mutations.MutationError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.patch("/days/{day_id}", response_model=DayPlan)
async def update_day(day_id: str, request: DayUpdateRequest, store: Store) -> DayPlan:
    """Update city, notes, start time and/or accommodation of a day."""

    def apply(day: DayPlan) -> DayPlan:
        if request.city is not None:
            day = mutations.update_city(day, request.city)
        if request.notes is not None:
            day = mutations.update_notes(day, request.notes)
        if request.accommodation_name is not None:
            day = mutations.update_accommodation(
                day, request.accommodation_name, request.accommodation_location
            )
        if request.start_time is not None:
            day = mutations.update_day_start_time(day, request.start_time)
        return day

    return await _mutate(store, day_id, "update_day", apply)


@router.get("/days/{day_id}/expenses")
async def get_day_expenses(day_id: str, store: Store) -> ExpenseSummary:
    return calculate_day_expenses(await _get_day(store, day_id))


@router.get("/days/{day_id}/advisories", response_model=AdvisoriesResponse)
async def get_day_advisories(day_id: str, store: Store) -> AdvisoriesResponse:
    """Overlaps and overnight spans worth flagging in the day view."""
    day = await _get_day(store, day_id)
    return AdvisoriesResponse(violations=find_overlaps(day) + find_overnight_activities(day))


@router.get("/days/{day_id}/weather", response_model=WeatherResponse)
async def get_day_weather(
    day_id: str,
    store: Store,
    forecast: Annotated[ForecastLookup, Depends(get_forecast_lookup)],
    geocoder: GeocoderDep,
) -> WeatherResponse:
    """Daily forecast for the day; null when out of range or unavailable."""
    day = await _get_day(store, day_id)
    return WeatherResponse(day_id=day.id, forecast=await forecast_for_day(day, forecast, geocoder))


@router.post(
    "/days/{day_id}/activities", response_model=DayPlan, status_code=status.HTTP_201_CREATED
)
async def add_activity(
    day_id: str,
    request: AddActivityRequest,
    store: Store,
    places: Places,
    geocoder: GeocoderDep,
    photo_urls: PhotoUrls,
) -> DayPlan:
    """Add an activity by name, enriched with place data, then reschedule."""
    day = await _get_day(store, day_id)
    activity = await build_activity(
        request.name,
        day.city,
        places=places,
        geocoder=geocoder,
        activity_type=request.type,
        duration_min=request.duration_min,
        photo_url_for=photo_urls,
    )
    return await _mutate(
        store,
        day_id,
        "add",
        lambda d: mutations.add_activity(
            d, activity, after_id=request.after_id, at_start=request.at_start
        ),
    )


@router.put("/days/{day_id}/activities/{activity_id}", response_model=DayPlan)
async def update_activity(
    day_id: str, activity_id: str, activity: Activity, store: Store
) -> DayPlan:
    if activity.id != activity_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Activity id mismatch")

    def update(day: DayPlan) -> DayPlan:
        mutations.require_activity(day, activity_id)
        return mutations.update_activity(day, activity)

    return await _mutate(store, day_id, "update", update)


@router.delete("/days/{day_id}/activities/{activity_id}", response_model=DayPlan)
async def delete_activity(day_id: str, activity_id: str, store: Store) -> DayPlan:
    """Delete an activity; an unknown id is a 404 and stores nothing."""

    def delete(day: DayPlan) -> DayPlan:
        mutations.require_activity(day, activity_id)
        return mutations.delete_activity(day, activity_id)

    return await _mutate(store, day_id, "delete", delete)


@router.post("/days/{day_id}/activities/{index}/move", response_model=DayPlan)
async def move_activity(day_id: str, index: int, request: MoveRequest, store: Store) -> DayPlan:
    return await _mutate(
        store, day_id, "move", lambda d: mutations.move_activity(d, index, request.direction)
    )


@router.post("/days/{day_id}/reorder", response_model=DayPlan)
async def reorder_activity(day_id: str, request: ReorderRequest, store: Store) -> DayPlan:
    return await _mutate(
        store,
        day_id,
        "reorder",
        lambda d: mutations.reorder_activity(d, request.source_index, request.target_index),
    )


@router.post("/days/{day_id}/sort", response_model=DayPlan)
async def sort_by_time(day_id: str, store: Store) -> DayPlan:
    return await _mutate(store, day_id, "sort", mutations.sort_by_time)


@router.post("/days/{day_id}/activities/{activity_id}/split", response_model=DayPlan)
async def split_activity(
    day_id: str,
    activity_id: str,
    request: SplitRequest,
    store: Store,
    places: Places,
    photo_urls: PhotoUrls,
) -> DayPlan:
    return await _mutate(
        store,
        day_id,
        "split",
        lambda d: split_with_places(d, activity_id, request.names, places, photo_urls),
    )


@router.post("/days/{day_id}/suggestions/accept", response_model=DayPlan)
async def accept_suggestion(
    day_id: str,
    suggestion: Activity,
    store: Store,
    places: Places,
    photo_urls: PhotoUrls,
) -> DayPlan:
    """Insert a suggested activity where its suggested_after_id points."""
    day = await _get_day(store, day_id)
    enriched = await enrich_activity(suggestion, day.city, places, photo_urls)
    return await _mutate(
        store, day_id, "accept_suggestion", lambda d: mutations.accept_suggestion(d, enriched)
    )


@router.post("/days/{day_id}/optimize", response_model=OptimizeResponse)
async def optimize_route(
    day_id: str,
    store: Store,
    providers: Annotated[TravelProviders, Depends(get_travel_providers)],
    geocoder: GeocoderDep,
) -> OptimizeResponse:
    """Reorder the day by the route solver and store fresh travel segments."""
    settings = get_settings()
    routes: list[RouteResult] = []

    async def optimize(day: DayPlan) -> DayPlan:
        new_day, route = await optimize_day(
            day,
            providers,
            geocoder,
            min_activities=settings.optimize_min_activities,
            return_to_origin=settings.return_to_origin,
        )
        routes.append(route)
        return new_day

    try:
        day = await _mutate(store, day_id, "optimize", optimize)
    except OptimizeRouteError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return OptimizeResponse(
        day=day,
        total_duration=routes[0].total_duration_text,
        total_duration_seconds=routes[0].total_duration_seconds,
    )

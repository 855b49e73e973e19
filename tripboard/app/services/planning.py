"""I/O-facing planning operations around the pure scheduling core.

Enrichment (place search, geocoding) and route optimization live here. Provider
failures are logged and treated as "no data"; they never abort a mutation.
"""

import logging
import uuid
from collections.abc import Callable, Sequence
from datetime import date

from tripboard.app.config import get_settings
from tripboard.app.models.common import ActivityType, Coordinates, default_coordinates
from tripboard.app.models.tool_results import DayForecast, PlaceResult, RouteResult
from tripboard.app.models.trip import Activity, DayPlan
from tripboard.app.routing.assembly import TravelProviders, assemble_route
from tripboard.app.scheduling.mutations import (
    SplitPart,
    apply_optimized_route,
    split_activity,
    update_accommodation,
)
from tripboard.app.scheduling.timeutils import minutes_to_time, parse_iso_date, time_to_minutes
from tripboard.app.services.providers import ForecastLookup, Geocoder, PlaceSearch

logger = logging.getLogger(__name__)

PhotoUrlBuilder = Callable[[str], str]


class OptimizeRouteError(Exception):
    """Route optimization preconditions were not met."""


async def find_place(
    query: str,
    places: PlaceSearch | None,
    fallback_query: str | None = None,
) -> PlaceResult | None:
    """Search a place, then the fallback query. Failures count as a miss."""
    if places is None:
        return None

    for candidate in (query, fallback_query):
        if not candidate:
            continue
        try:
            place = await places(candidate)
        except Exception as e:
            logger.warning("Place search failed for %r: %s", candidate, type(e).__name__)
            continue
        if place is not None:
            return place
    return None


async def safe_geocode(address: str, geocoder: Geocoder | None) -> Coordinates | None:
    """Geocode an address; failures are logged and return None."""
    if geocoder is None:
        return None
    try:
        return await geocoder(address)
    except Exception as e:
        logger.warning("Geocoding failed for %r: %s", address, type(e).__name__)
        return None


async def build_activity(
    name: str,
    city: str,
    *,
    places: PlaceSearch | None = None,
    geocoder: Geocoder | None = None,
    activity_type: ActivityType = ActivityType.sightseeing,
    duration_min: int | None = None,
    description: str = "Planned stop",
    photo_url_for: PhotoUrlBuilder | None = None,
) -> Activity:
    """Create a new unlocked activity enriched with canonical place data.

    Times are placeholders; the recalculator schedules the activity when it is
    committed to a day. Unresolved places get the default coordinate.
    """
    settings = get_settings()
    if duration_min is None:
        duration_min = settings.default_activity_duration_min
    start = time_to_minutes(settings.default_day_start)

    location = default_coordinates()
    final_name = name
    image_url = None
    place_id = None

    place = await find_place(f"{name} {city}", places, fallback_query=name)
    if place is not None:
        location = place.location
        final_name = place.name
        place_id = place.place_id
        if place.photo_reference and photo_url_for is not None:
            image_url = photo_url_for(place.photo_reference)
    else:
        coords = await safe_geocode(f"{name}, {city}", geocoder)
        if coords is not None:
            location = coords

    return Activity(
        id=f"new-{uuid.uuid4().hex[:12]}",
        name=final_name,
        description=description,
        start_time=minutes_to_time(start),
        end_time=minutes_to_time(start + duration_min),
        location=location,
        type=activity_type,
        image_url=image_url,
        google_place_id=place_id,
        locked_start_time=False,
    )


async def enrich_activity(
    activity: Activity,
    city: str,
    places: PlaceSearch | None,
    photo_url_for: PhotoUrlBuilder | None = None,
) -> Activity:
    """Fill in location, photo and place id from a place search.

    Used for suggestions and generated activities; on a miss the activity is
    returned untouched.
    """
    place = await find_place(f"{activity.name} {city}", places, fallback_query=activity.name)
    if place is None:
        return activity

    update: dict[str, object] = {"location": place.location, "google_place_id": place.place_id}
    if place.photo_reference and photo_url_for is not None and not activity.image_url:
        update["image_url"] = photo_url_for(place.photo_reference)
    return activity.model_copy(update=update)


async def split_with_places(
    day: DayPlan,
    activity_id: str,
    names: Sequence[str],
    places: PlaceSearch | None = None,
    photo_url_for: PhotoUrlBuilder | None = None,
) -> DayPlan:
    """Split an activity into named stops, resolving each name first."""
    parts: list[SplitPart] = []
    for name in names:
        place = await find_place(f"{name} {day.city}", places)
        if place is None:
            parts.append(SplitPart(name=name))
            continue
        parts.append(
            SplitPart(
                name=place.name,
                location=place.location,
                image_url=(
                    photo_url_for(place.photo_reference)
                    if place.photo_reference and photo_url_for
                    else None
                ),
                google_place_id=place.place_id,
            )
        )
    return split_activity(day, activity_id, parts)


async def resolve_origin(
    day: DayPlan, geocoder: Geocoder | None
) -> tuple[Coordinates | None, DayPlan]:
    """Find where the day starts.

    Order: stored accommodation coordinates, geocoded accommodation name
    (stored back on the day), then the first activity's location.
    """
    accommodation = day.accommodation
    if accommodation is not None and accommodation.location is not None:
        return accommodation.location, day

    if accommodation is not None and accommodation.name:
        coords = await safe_geocode(accommodation.name, geocoder)
        if coords is not None:
            return coords, update_accommodation(day, accommodation.name, coords)

    if day.activities:
        return day.activities[0].location, day

    return None, day


async def optimize_day(
    day: DayPlan,
    providers: TravelProviders,
    geocoder: Geocoder | None = None,
    *,
    min_activities: int = 2,
    return_to_origin: bool = True,
) -> tuple[DayPlan, RouteResult]:
    """Reorder the day by the route solver and adopt fresh travel segments.

    Raises:
        OptimizeRouteError: Fewer than min_activities activities, or no
            usable origin
    """
    if len(day.activities) < min_activities:
        raise OptimizeRouteError(f"Add at least {min_activities} activities to optimize the route.")

    origin, day = await resolve_origin(day, geocoder)
    if origin is None:
        raise OptimizeRouteError(
            "Could not determine a start location. Set a hotel or give activities locations."
        )

    route = await assemble_route(
        origin,
        day.activities,
        providers,
        day_start_time=day.start_time,
        travel_date=parse_iso_date(day.date),
        return_to_origin=return_to_origin,
    )
    logger.info(
        "Optimized day %s: %d stops, total travel %s",
        day.id,
        len(route.order),
        route.total_duration_text,
    )
    return apply_optimized_route(day, route), route


async def forecast_for_day(
    day: DayPlan,
    forecast: ForecastLookup,
    geocoder: Geocoder | None = None,
    *,
    today: date | None = None,
    horizon_days: int | None = None,
) -> DayForecast | None:
    """Weather for a day, or None when it cannot be known.

    Days further back than yesterday or beyond the forecast horizon are not
    looked up. The location is the hotel, else the first stop, else the
    geocoded city. Provider failures are logged and give None.
    """
    day_date = parse_iso_date(day.date)
    if day_date is None:
        return None

    today = today or date.today()
    if horizon_days is None:
        horizon_days = get_settings().weather_horizon_days
    offset = (day_date - today).days
    if offset < -1 or offset > horizon_days:
        logger.info("Day %s (%s) is outside the forecast window", day.id, day.date)
        return None

    if day.accommodation is not None and day.accommodation.location is not None:
        location = day.accommodation.location
    elif day.activities:
        location = day.activities[0].location
    else:
        location = await safe_geocode(day.city, geocoder)
    if location is None:
        return None

    try:
        return await forecast(location, day_date)
    except Exception as e:
        logger.warning("Forecast failed for day %s: %s", day.id, type(e).__name__)
        return None

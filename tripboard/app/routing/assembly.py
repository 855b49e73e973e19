"""Travel-time assembly for an optimized route.

After the solver fixes the visiting order, each leg is resolved in path order:
walking and transit estimates for one leg are requested concurrently, the
selection policy picks the primary segment, and a simulated departure clock
advances by travel time plus the stay at each stop so later transit queries
use a plausible time of day. A failing leg degrades to a placeholder segment
instead of aborting the route.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from tripboard.app.config import get_settings
from tripboard.app.models.common import Coordinates
from tripboard.app.models.tool_results import RouteResult, TravelEstimate
from tripboard.app.models.trip import START_ID, Activity, TravelSegment
from tripboard.app.scheduling.route_solver import solve_order
from tripboard.app.scheduling.selection import (
    placeholder_segment,
    segment_from_estimate,
    select_segment,
)
from tripboard.app.scheduling.timeutils import MINUTES_PER_DAY, format_duration, time_to_minutes

logger = logging.getLogger(__name__)

TravelEstimator = Callable[[Coordinates, Coordinates, datetime], Awaitable[TravelEstimate | None]]


@dataclass
class TravelProviders:
    """Travel-time providers consulted per leg.

    walking and transit are queried together; fallback_transit is the
    provider-agnostic query used when both come back empty, and for the
    optional return leg.
    """

    walking: TravelEstimator | None = None
    transit: TravelEstimator | None = None
    fallback_transit: TravelEstimator | None = None


def stay_minutes(activity: Activity) -> int:
    """Time spent at a stop.

    A positive locked duration, else the span (wrapping midnight), else the
    default activity duration.
    """
    if activity.locked_duration_minutes and activity.locked_duration_minutes > 0:
        return activity.locked_duration_minutes
    span = time_to_minutes(activity.end_time) - time_to_minutes(activity.start_time)
    if span < 0:
        span += MINUTES_PER_DAY
    return span if span > 0 else get_settings().default_activity_duration_min


def _first_departure(travel_date: date | None, day_start_time: str) -> datetime:
    day = travel_date or (date.today() + timedelta(days=1))
    minutes = time_to_minutes(day_start_time)
    return datetime.combine(day, time(hour=(minutes // 60) % 24, minute=minutes % 60))


async def _estimate(
    provider: TravelEstimator | None,
    name: str,
    origin: Coordinates,
    destination: Coordinates,
    departure: datetime,
) -> TravelEstimate | None:
    """Call one provider; any failure is logged and treated as no estimate."""
    if provider is None:
        return None
    try:
        return await provider(origin, destination, departure)
    except Exception as e:
        logger.warning("%s estimate failed: %s: %s", name, type(e).__name__, e)
        return None


async def resolve_leg(
    providers: TravelProviders,
    origin: Coordinates,
    destination: Coordinates,
    departure: datetime,
    from_id: str,
    to_id: str,
    *,
    walk_max_min: int | None = None,
    close_match_min: int | None = None,
) -> TravelSegment:
    """Resolve one leg to a segment; never raises for provider failures."""
    walk_est, transit_est = await asyncio.gather(
        _estimate(providers.walking, "walking", origin, destination, departure),
        _estimate(providers.transit, "transit", origin, destination, departure),
    )

    selected = select_segment(
        segment_from_estimate(walk_est, from_id, to_id) if walk_est else None,
        segment_from_estimate(transit_est, from_id, to_id) if transit_est else None,
        walk_max_min=walk_max_min,
        close_match_min=close_match_min,
    )
    if selected is not None:
        return selected

    fallback = await _estimate(
        providers.fallback_transit, "fallback transit", origin, destination, departure
    )
    if fallback is not None:
        return segment_from_estimate(fallback, from_id, to_id)

    logger.warning("No travel data for leg %s -> %s; using placeholder", from_id, to_id)
    return placeholder_segment(from_id, to_id)


async def assemble_route(
    origin: Coordinates,
    activities: Sequence[Activity],
    providers: TravelProviders,
    *,
    day_start_time: str | None = None,
    travel_date: date | None = None,
    return_to_origin: bool = True,
    walk_max_min: int | None = None,
    close_match_min: int | None = None,
) -> RouteResult:
    """Order the day's activities and fetch a segment for every leg.

    Args:
        origin: Start of the day (accommodation or first stop)
        activities: Activities in their current order
        providers: Travel-time providers
        day_start_time: HH:mm departure from the origin (default_day_start setting)
        travel_date: Calendar date for transit queries (defaults to tomorrow)
        return_to_origin: Add the trip back to origin to the total duration

    Returns:
        RouteResult with the permutation, one segment per leg starting at
        "start", and the total travel duration
    """
    if day_start_time is None:
        day_start_time = get_settings().default_day_start
    order = solve_order(origin, activities, day_start_time)
    departure = _first_departure(travel_date, day_start_time)

    segments: list[TravelSegment] = []
    total_seconds = 0
    position = origin
    position_id = START_ID

    # Sequential across legs: each departure depends on the previous leg
    for index in order:
        activity = activities[index]
        segment = await resolve_leg(
            providers,
            position,
            activity.location,
            departure,
            position_id,
            activity.id,
            walk_max_min=walk_max_min,
            close_match_min=close_match_min,
        )
        segments.append(segment)

        total_seconds += segment.duration_value
        departure += timedelta(seconds=segment.duration_value, minutes=stay_minutes(activity))

        position = activity.location
        position_id = activity.id

    if return_to_origin and order:
        back = await _estimate(
            providers.fallback_transit, "return leg", position, origin, departure
        )
        if back is not None:
            total_seconds += back.duration_seconds

    return RouteResult(
        order=order,
        segments=segments,
        total_duration_seconds=total_seconds,
        total_duration_text=format_duration(total_seconds),
    )

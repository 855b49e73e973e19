"""NAVITIME transit adapter (RapidAPI route_transit)."""

from datetime import datetime
from typing import Any

import httpx

from tripboard.app.adapters.maps_client import get_maps_client
from tripboard.app.adapters.provenance import provenance_for_http
from tripboard.app.models.common import Coordinates, TravelMode
from tripboard.app.models.tool_results import TravelEstimate
from tripboard.app.scheduling.timeutils import format_leg_duration

DEFAULT_HOST = "navitime-route-totalnavi.p.rapidapi.com"

_TRAIN_SECTION_MODES = {"train", "subway", "bullet_train"}
_BUS_SECTION_MODES = {"bus", "local_bus"}
_TRAIN_MOVE_TYPES = ("train", "subway", "monorail")


def _primary_mode(route: dict[str, Any], fare: float) -> TravelMode:
    """Classify a route as TRAIN, BUS or WALKING from its sections/move types."""
    sections = route.get("sections") or []
    move_types: list[str] = route["summary"]["move"].get("move_type") or []

    has_train = any(s.get("mode") in _TRAIN_SECTION_MODES for s in sections) or any(
        any(kind in t for kind in _TRAIN_MOVE_TYPES) for t in move_types
    )
    has_bus = any(s.get("mode") in _BUS_SECTION_MODES for s in sections) or any(
        "bus" in t for t in move_types
    )

    if has_train:
        return TravelMode.TRAIN
    if has_bus:
        return TravelMode.BUS
    # A fare with no recognised transit section is almost always rail
    if fare > 0:
        return TravelMode.TRAIN
    return TravelMode.WALKING


async def fetch_transit_route(
    origin: Coordinates,
    destination: Coordinates,
    departure: datetime,
    *,
    api_key: str,
    host: str = DEFAULT_HOST,
    client: httpx.AsyncClient | None = None,
) -> TravelEstimate | None:
    """Fetch the best public-transport route between two coordinates.

    Args:
        origin: Leg start
        destination: Leg end
        departure: Local departure time
        api_key: RapidAPI key
        host: RapidAPI host for NAVITIME
        client: Optional httpx client (defaults to the shared maps client)

    Returns:
        TravelEstimate with fare and TRAIN/BUS sub-mode, or None if no route

    Raises:
        httpx.HTTPError: On network or HTTP errors
    """
    url = f"https://{host}/route_transit"
    params = {
        "start": f"{origin.lat},{origin.lng}",
        "goal": f"{destination.lat},{destination.lng}",
        "start_time": departure.strftime("%Y-%m-%dT%H:%M:%S"),
    }
    headers = {"x-rapidapi-key": api_key, "x-rapidapi-host": host}

    client = client or get_maps_client()
    response = await client.get(url, params=params, headers=headers)
    response.raise_for_status()
    data = response.json()

    items = data.get("items") or []
    if not items:
        return None

    route = items[0]
    move = route["summary"]["move"]

    # Prefer the ticket fare (unit_0), then IC card (unit_48)
    fare_units = move.get("fare") or {}
    fare = float(fare_units.get("unit_0") or fare_units.get("unit_48") or 0)

    minutes = int(move.get("time") or route["summary"].get("time") or 0)
    distance_m = move.get("distance") or 0

    return TravelEstimate(
        mode=_primary_mode(route, fare),
        duration_seconds=minutes * 60,
        duration_text=format_leg_duration(minutes),
        distance_text=f"{distance_m / 1000:.1f} km",
        fare_amount=fare if fare > 0 else None,
        provenance=provenance_for_http(source="transit.navitime", url=url),
    )

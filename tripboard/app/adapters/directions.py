"""Google Directions adapter - walking legs and the generic transit fallback."""

from datetime import datetime

import httpx

from tripboard.app.adapters.maps_client import get_maps_client
from tripboard.app.adapters.provenance import provenance_for_http
from tripboard.app.models.common import Coordinates, TravelMode
from tripboard.app.models.tool_results import TravelEstimate

DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"

_API_MODES = {
    TravelMode.WALKING: "walking",
    TravelMode.TRANSIT: "transit",
    TravelMode.DRIVING: "driving",
}


async def fetch_directions(
    mode: TravelMode,
    origin: Coordinates,
    destination: Coordinates,
    departure: datetime | None = None,
    *,
    api_key: str,
    base_url: str = DIRECTIONS_URL,
    client: httpx.AsyncClient | None = None,
) -> TravelEstimate | None:
    """Fetch the first route's first leg from the Directions API.

    Args:
        mode: WALKING, TRANSIT or DRIVING
        origin: Leg start
        destination: Leg end
        departure: Departure time (used for transit schedules)
        api_key: Google Maps API key
        base_url: Directions endpoint
        client: Optional httpx client (defaults to the shared maps client)

    Returns:
        TravelEstimate, or None when no route exists

    Raises:
        httpx.HTTPError: On network or HTTP errors
        ValueError: For modes the API does not serve
    """
    if mode not in _API_MODES:
        raise ValueError(f"Directions API does not support mode {mode.value}")

    params: dict[str, str | int] = {
        "origin": f"{origin.lat},{origin.lng}",
        "destination": f"{destination.lat},{destination.lng}",
        "mode": _API_MODES[mode],
        "key": api_key,
    }
    if departure is not None and mode == TravelMode.TRANSIT:
        params["departure_time"] = int(departure.timestamp())

    client = client or get_maps_client()
    response = await client.get(base_url, params=params)
    response.raise_for_status()
    data = response.json()

    # Response structure: {status, routes: [{legs: [{duration, distance}]}]}
    routes = data.get("routes") or []
    if data.get("status") != "OK" or not routes:
        return None

    leg = routes[0]["legs"][0]
    duration = leg.get("duration") or {}
    distance = leg.get("distance") or {}

    return TravelEstimate(
        mode=mode,
        duration_seconds=int(duration.get("value") or 0),
        duration_text=duration.get("text") or "",
        distance_text=distance.get("text"),
        provenance=provenance_for_http(
            source=f"directions.google.{_API_MODES[mode]}",
            url=base_url,
        ),
    )

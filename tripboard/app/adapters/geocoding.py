"""Google Geocoding adapter."""

import httpx

from tripboard.app.adapters.maps_client import get_maps_client
from tripboard.app.models.common import Coordinates

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


async def geocode(
    address: str,
    *,
    api_key: str,
    base_url: str = GEOCODE_URL,
    client: httpx.AsyncClient | None = None,
) -> Coordinates | None:
    """Resolve a free-text address to coordinates, or None if not found.

    Raises:
        httpx.HTTPError: On network or HTTP errors
    """
    client = client or get_maps_client()
    response = await client.get(base_url, params={"address": address, "key": api_key})
    response.raise_for_status()
    data = response.json()

    results = data.get("results") or []
    if not results:
        return None

    location = results[0]["geometry"]["location"]
    return Coordinates(lat=location["lat"], lng=location["lng"])

"""Google Places text-search adapter (name, coordinates, photo reference)."""

from typing import Any

import httpx

from tripboard.app.adapters.maps_client import get_maps_client
from tripboard.app.models.common import Coordinates
from tripboard.app.models.tool_results import PlaceResult

TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"

RETRY_REGION = "Japan"


def _to_place(result: dict[str, Any]) -> PlaceResult:
    location = result["geometry"]["location"]
    photos = result.get("photos") or []
    return PlaceResult(
        name=result["name"],
        place_id=result.get("place_id"),
        location=Coordinates(lat=location["lat"], lng=location["lng"]),
        photo_reference=photos[0].get("photo_reference") if photos else None,
        rating=result.get("rating"),
        user_ratings_total=result.get("user_ratings_total"),
        address=result.get("formatted_address"),
    )


async def _text_search(
    client: httpx.AsyncClient, query: str, api_key: str, base_url: str
) -> PlaceResult | None:
    response = await client.get(base_url, params={"query": query, "key": api_key})
    response.raise_for_status()
    data = response.json()
    results = data.get("results") or []
    if data.get("status") != "OK" or not results:
        return None
    return _to_place(results[0])


async def search_place(
    query: str,
    *,
    api_key: str,
    base_url: str = TEXT_SEARCH_URL,
    client: httpx.AsyncClient | None = None,
) -> PlaceResult | None:
    """Find the best match for a free-text query.

    A miss is retried once with the region name appended, unless the query
    already mentions it.

    Raises:
        httpx.HTTPError: On network or HTTP errors
    """
    client = client or get_maps_client()

    place = await _text_search(client, query, api_key, base_url)
    if place is None and RETRY_REGION.lower() not in query.lower():
        place = await _text_search(client, f"{query} {RETRY_REGION}", api_key, base_url)
    return place


def photo_url(photo_reference: str, api_key: str, max_width: int = 600) -> str:
    """Build a displayable photo URL from a photo reference."""
    return f"{PHOTO_URL}?maxwidth={max_width}&photo_reference={photo_reference}&key={api_key}"

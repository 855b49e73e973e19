"""Weather adapter using the Open-Meteo forecast API (keyless, free tier)."""

from datetime import date

import httpx

from tripboard.app.adapters.maps_client import get_maps_client
from tripboard.app.adapters.provenance import provenance_for_http
from tripboard.app.models.common import Coordinates
from tripboard.app.models.tool_results import DayForecast

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

# WMO weather interpretation codes, grouped as Open-Meteo documents them
_WMO_DESCRIPTIONS = {
    (0,): "Clear sky",
    (1,): "Mainly clear",
    (2,): "Partly cloudy",
    (3,): "Overcast",
    (45, 48): "Fog",
    (51, 53, 55): "Drizzle",
    (56, 57): "Freezing drizzle",
    (61, 63, 65): "Rain",
    (66, 67): "Freezing rain",
    (71, 73, 75, 77): "Snow",
    (80, 81, 82): "Rain showers",
    (85, 86): "Snow showers",
    (95, 96, 99): "Thunderstorm",
}


def describe_weather_code(code: int | None) -> str:
    """Human-readable label for a WMO code; unknown codes give "Unknown"."""
    for codes, label in _WMO_DESCRIPTIONS.items():
        if code in codes:
            return label
    return "Unknown"


def _value_at(daily: dict, key: str, index: int):
    values = daily.get(key) or []
    return values[index] if index < len(values) else None


async def fetch_daily_forecast(
    location: Coordinates,
    day: date,
    *,
    timezone: str = "Asia/Tokyo",
    base_url: str = FORECAST_URL,
    client: httpx.AsyncClient | None = None,
) -> DayForecast | None:
    """Fetch the forecast for a single day.

    Args:
        location: Where the day is spent
        day: Calendar date to forecast
        timezone: IANA zone the daily aggregates are computed in
        base_url: Open-Meteo API base URL
        client: Optional httpx client (for testing with mocks)

    Returns:
        DayForecast, or None if the response has no entry for the day

    Raises:
        httpx.HTTPError: On network or HTTP errors
    """
    # Docs: https://open-meteo.com/en/docs
    params: dict[str, str | float] = {
        "latitude": location.lat,
        "longitude": location.lng,
        "daily": (
            "weather_code,temperature_2m_max,temperature_2m_min,"
            "precipitation_probability_max"
        ),
        "timezone": timezone,
        "start_date": day.isoformat(),
        "end_date": day.isoformat(),
    }
    url = f"{base_url}?{'&'.join(f'{k}={v}' for k, v in params.items())}"

    client = client or get_maps_client()
    response = await client.get(base_url, params=params)
    response.raise_for_status()

    # Response structure: {daily: {time: [...], temperature_2m_max: [...], ...}}
    daily = response.json().get("daily") or {}
    times = daily.get("time") or []
    if day.isoformat() not in times:
        return None
    index = times.index(day.isoformat())

    code = _value_at(daily, "weather_code", index)
    return DayForecast(
        date=day,
        max_temp_c=_value_at(daily, "temperature_2m_max", index),
        min_temp_c=_value_at(daily, "temperature_2m_min", index),
        weather_code=code,
        description=describe_weather_code(code),
        precipitation_probability=_value_at(daily, "precipitation_probability_max", index),
        provenance=provenance_for_http(source="weather.open_meteo", url=url),
    )

"""Tests for executor-wrapped provider lookups."""

from datetime import date

import httpx
import pytest

from tripboard.app.config import Settings
from tripboard.app.models.common import Coordinates
from tripboard.app.services.providers import build_forecast_lookup
from tripboard.app.tools.executor import ProviderExecutor

FORECAST = {
    "daily": {
        "time": ["2025-02-03"],
        "weather_code": [1],
        "temperature_2m_max": [12.0],
        "temperature_2m_min": [4.0],
        "precipitation_probability_max": [10],
    }
}


@pytest.mark.asyncio
async def test_forecast_lookup_is_cached_per_area_and_day() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=FORECAST)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    lookup = build_forecast_lookup(Settings(), ProviderExecutor(), client)

    first = await lookup(Coordinates(lat=35.6595, lng=139.7005), date(2025, 2, 3))
    nearby = await lookup(Coordinates(lat=35.6601, lng=139.6998), date(2025, 2, 3))

    assert first is not None
    assert first.description == "Mainly clear"
    assert nearby == first
    assert len(requests) == 1
    assert requests[0].url.params["latitude"] == "35.66"
    await client.aclose()


@pytest.mark.asyncio
async def test_forecast_lookup_uses_configured_timezone() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=FORECAST)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    lookup = build_forecast_lookup(Settings(weather_timezone="Asia/Seoul"), ProviderExecutor(), client)

    await lookup(Coordinates(lat=37.5665, lng=126.978), date(2025, 2, 3))

    assert requests[0].url.params["timezone"] == "Asia/Seoul"
    await client.aclose()

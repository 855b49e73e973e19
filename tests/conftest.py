"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from tripboard.app.config import get_settings
from tripboard.app.models.common import Coordinates, TravelMode
from tripboard.app.models.trip import Activity, DayPlan, TravelSegment
from tripboard.app.tools.executor import get_breaker_registry

ActivityFactory = Callable[..., Activity]


@pytest.fixture(autouse=True)
def reset_breakers() -> Iterator[None]:
    """Circuit breaker state is process-wide; isolate it per test."""
    get_breaker_registry().clear()
    yield
    get_breaker_registry().clear()


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[..., None]]:
    """Override settings through environment variables for one test.

    Usage:
        settings_env(walk_max_min=10)
    """

    def apply(**values: Any) -> None:
        for name, value in values.items():
            monkeypatch.setenv(name.upper(), str(value))
        get_settings.cache_clear()

    yield apply
    get_settings.cache_clear()


@pytest.fixture
def make_activity() -> ActivityFactory:
    """Build an activity with sensible defaults.

    Usage:
        shrine = make_activity("shrine", start="09:00", end="10:00")
    """

    def factory(
        activity_id: str,
        start: str = "09:00",
        end: str = "10:00",
        *,
        lat: float = 35.68,
        lng: float = 139.76,
        **fields: Any,
    ) -> Activity:
        return Activity(
            id=activity_id,
            name=fields.pop("name", activity_id.title()),
            start_time=start,
            end_time=end,
            location=Coordinates(lat=lat, lng=lng),
            **fields,
        )

    return factory


@pytest.fixture
def make_segment() -> Callable[..., TravelSegment]:
    def factory(
        from_id: str,
        to_id: str,
        seconds: int,
        mode: TravelMode = TravelMode.WALKING,
        **fields: Any,
    ) -> TravelSegment:
        return TravelSegment(
            from_id=from_id,
            to_id=to_id,
            mode=mode,
            duration=f"{seconds // 60} min",
            duration_value=seconds,
            **fields,
        )

    return factory


@pytest.fixture
def three_stop_day(make_activity: ActivityFactory) -> DayPlan:
    """A recalculated 09:00 day: a 09:00-10:00, b 10:30-12:00, c 12:30-13:30."""
    return DayPlan(
        id="day-1",
        date="2025-02-03",
        city="Tokyo",
        start_time="09:00",
        activities=[
            make_activity("a", "09:00", "10:00"),
            make_activity("b", "10:30", "12:00"),
            make_activity("c", "12:30", "13:30"),
        ],
    )

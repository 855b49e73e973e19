"""Tests for per-leg travel resolution and route assembly."""

from datetime import date, datetime

import pytest

from tripboard.app.models.common import Coordinates, TravelMode
from tripboard.app.models.tool_results import TravelEstimate
from tripboard.app.routing.assembly import (
    TravelProviders,
    assemble_route,
    resolve_leg,
    stay_minutes,
)

ORIGIN = Coordinates(lat=35.0, lng=139.0)
DEPARTURE = datetime(2025, 2, 3, 9, 0)


def _estimate(mode: TravelMode, minutes: int, fare: float | None = None) -> TravelEstimate:
    return TravelEstimate(
        mode=mode,
        duration_seconds=minutes * 60,
        duration_text=f"{minutes} min",
        fare_amount=fare,
    )


def _fixed(estimate: TravelEstimate | None, calls: list[datetime] | None = None):
    async def provider(origin: Coordinates, destination: Coordinates, departure: datetime):
        if calls is not None:
            calls.append(departure)
        return estimate

    return provider


async def _broken(origin: Coordinates, destination: Coordinates, departure: datetime):
    raise RuntimeError("provider down")


class TestStayMinutes:
    def test_locked_duration(self, make_activity) -> None:
        assert stay_minutes(make_activity("a", "09:00", "10:00", locked_duration_minutes=150)) == 150

    def test_span_wraps_midnight(self, make_activity) -> None:
        assert stay_minutes(make_activity("a", "23:00", "01:00")) == 120

    def test_zero_span_defaults(self, make_activity) -> None:
        assert stay_minutes(make_activity("a", "10:00", "10:00")) == 60

    @pytest.mark.parametrize("locked", [0, -30])
    def test_non_positive_locked_duration_is_ignored(self, make_activity, locked: int) -> None:
        activity = make_activity("a", "09:00", "10:30", locked_duration_minutes=locked)
        assert stay_minutes(activity) == 90


class TestResolveLeg:
    @pytest.mark.asyncio
    async def test_competitive_walk_keeps_transit_alternative(self) -> None:
        providers = TravelProviders(
            walking=_fixed(_estimate(TravelMode.WALKING, 20)),
            transit=_fixed(_estimate(TravelMode.TRAIN, 22, fare=180)),
        )

        segment = await resolve_leg(providers, ORIGIN, ORIGIN, DEPARTURE, "start", "a")

        assert segment.mode == TravelMode.WALKING
        assert segment.alternative_mode == TravelMode.TRAIN
        assert (segment.from_id, segment.to_id) == ("start", "a")

    @pytest.mark.asyncio
    async def test_failing_transit_degrades_to_walking(self) -> None:
        providers = TravelProviders(walking=_fixed(_estimate(TravelMode.WALKING, 50)), transit=_broken)

        segment = await resolve_leg(providers, ORIGIN, ORIGIN, DEPARTURE, "a", "b")

        assert segment.mode == TravelMode.WALKING
        assert segment.duration_value == 50 * 60

    @pytest.mark.asyncio
    async def test_fallback_transit_when_both_empty(self) -> None:
        fallback_calls: list[datetime] = []
        providers = TravelProviders(
            walking=_fixed(None),
            transit=_broken,
            fallback_transit=_fixed(_estimate(TravelMode.TRANSIT, 35), fallback_calls),
        )

        segment = await resolve_leg(providers, ORIGIN, ORIGIN, DEPARTURE, "a", "b")

        assert segment.mode == TravelMode.TRANSIT
        assert fallback_calls == [DEPARTURE]

    @pytest.mark.asyncio
    async def test_fallback_not_called_when_primary_found(self) -> None:
        fallback_calls: list[datetime] = []
        providers = TravelProviders(
            walking=_fixed(_estimate(TravelMode.WALKING, 10)),
            fallback_transit=_fixed(_estimate(TravelMode.TRANSIT, 5), fallback_calls),
        )

        await resolve_leg(providers, ORIGIN, ORIGIN, DEPARTURE, "a", "b")

        assert fallback_calls == []

    @pytest.mark.asyncio
    async def test_placeholder_when_nothing_answers(self, caplog) -> None:
        segment = await resolve_leg(TravelProviders(), ORIGIN, ORIGIN, DEPARTURE, "a", "b")

        assert segment.duration == "?"
        assert segment.duration_value == 0
        assert "a -> b" in caplog.text


class TestAssembleRoute:
    @pytest.mark.asyncio
    async def test_segments_follow_solver_order(self, make_activity) -> None:
        activities = [
            make_activity("far", "09:00", "10:00", lat=35.3, lng=139.0),
            make_activity("near", "09:00", "10:30", lat=35.1, lng=139.0),
        ]
        walking_calls: list[datetime] = []
        providers = TravelProviders(walking=_fixed(_estimate(TravelMode.WALKING, 15), walking_calls))

        route = await assemble_route(
            ORIGIN,
            activities,
            providers,
            day_start_time="09:00",
            travel_date=date(2025, 2, 3),
            return_to_origin=False,
        )

        assert route.order == [1, 0]
        assert [(s.from_id, s.to_id) for s in route.segments] == [("start", "near"), ("near", "far")]
        assert route.total_duration_seconds == 30 * 60
        assert route.total_duration_text == "30m"
        # Clock: 09:00 + 15 travel + 90 stay at "near"
        assert walking_calls == [datetime(2025, 2, 3, 9, 0), datetime(2025, 2, 3, 10, 45)]

    @pytest.mark.asyncio
    async def test_return_leg_counts_toward_total_only(self, make_activity) -> None:
        activities = [make_activity("a", lat=35.1, lng=139.0)]
        providers = TravelProviders(
            walking=_fixed(_estimate(TravelMode.WALKING, 10)),
            fallback_transit=_fixed(_estimate(TravelMode.TRANSIT, 40)),
        )

        route = await assemble_route(ORIGIN, activities, providers, travel_date=date(2025, 2, 3))

        assert len(route.segments) == 1
        assert route.total_duration_seconds == 50 * 60
        assert route.total_duration_text == "50m"

    @pytest.mark.asyncio
    async def test_placeholder_legs_still_produce_a_route(self, make_activity) -> None:
        activities = [make_activity("a"), make_activity("b")]

        route = await assemble_route(ORIGIN, activities, TravelProviders(), travel_date=date(2025, 2, 3))

        assert len(route.segments) == 2
        assert all(s.duration == "?" for s in route.segments)
        assert route.total_duration_seconds == 0

    @pytest.mark.asyncio
    async def test_empty_day(self) -> None:
        route = await assemble_route(ORIGIN, [], TravelProviders())
        assert route.order == []
        assert route.segments == []
        assert route.total_duration_text == "0m"

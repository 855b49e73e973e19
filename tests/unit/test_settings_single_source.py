"""Test that scheduling defaults are read from Settings, not duplicated."""

import pytest

from tripboard.app.config import get_settings
from tripboard.app.models.common import Coordinates, default_coordinates
from tripboard.app.models.trip import DayPlan
from tripboard.app.routing.assembly import stay_minutes
from tripboard.app.scheduling.recalculator import effective_duration, recalculate_schedule
from tripboard.app.services.planning import build_activity


def test_scheduling_defaults_accessible() -> None:
    settings = get_settings()
    assert settings.default_day_start == "09:00"
    assert settings.default_travel_buffer_min == 30
    assert settings.default_activity_duration_min == 60
    assert settings.time_rounding_min == 5


def test_selection_thresholds_accessible() -> None:
    settings = get_settings()
    assert settings.walk_max_min == 45
    assert settings.close_match_min == 15


def test_travel_buffer_from_settings(make_activity, settings_env) -> None:
    settings_env(default_travel_buffer_min=10)

    result = recalculate_schedule([make_activity("a"), make_activity("b")], "09:00")

    assert [(a.start_time, a.end_time) for a in result] == [("09:00", "10:00"), ("10:10", "11:10")]


def test_day_start_and_rounding_from_settings(make_activity, settings_env) -> None:
    settings_env(default_day_start="08:02", time_rounding_min=15)

    result = recalculate_schedule([make_activity("a")])

    assert result[0].start_time == "08:15"


def test_default_duration_from_settings(make_activity, settings_env) -> None:
    settings_env(default_activity_duration_min=90)
    overnight = make_activity("bar", "23:00", "01:00")

    assert effective_duration(overnight) == 90
    assert stay_minutes(make_activity("zero", "10:00", "10:00")) == 90


def test_new_day_start_from_settings(settings_env) -> None:
    settings_env(default_day_start="10:30")
    assert DayPlan(id="d", date="2025-02-03", city="Osaka").start_time == "10:30"


def test_placeholder_location_from_settings(settings_env) -> None:
    settings_env(default_lat=34.6937, default_lng=135.5023)
    assert default_coordinates() == Coordinates(lat=34.6937, lng=135.5023)


@pytest.mark.asyncio
async def test_new_activity_uses_default_duration(settings_env) -> None:
    settings_env(default_activity_duration_min=45)

    activity = await build_activity("Dotonbori", "Osaka")

    assert (activity.start_time, activity.end_time) == ("09:00", "09:45")

"""Itinerary mutation handlers.

Each handler is a pure transform ``(day, ...) -> day'`` that ends with a
schedule recalculation. The caller owns the read-modify-write cycle and
publishes the returned snapshot; nothing here holds state between calls.

Existing travel segments are always passed to the recalculator. Segments are
matched by activity ids, so hops that no longer exist after a reorder simply
fall back to the default buffer.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal

from tripboard.app.config import get_settings
from tripboard.app.models.common import Coordinates
from tripboard.app.models.tool_results import RouteResult
from tripboard.app.models.trip import (
    START_ID,
    Accommodation,
    Activity,
    DayPlan,
    TravelSegment,
    Trip,
)
from tripboard.app.scheduling.recalculator import recalculate_schedule
from tripboard.app.scheduling.timeutils import minutes_to_time, parse_iso_date, time_to_minutes

logger = logging.getLogger(__name__)

MIN_SPLIT_DURATION_MIN = 60


class MutationError(ValueError):
    """A mutation was refused."""


class ActivityNotFoundError(MutationError):
    """No activity with the requested id exists in the day."""


@dataclass(frozen=True)
class SplitPart:
    """One replacement stop produced by splitting an activity."""

    name: str
    location: Coordinates | None = None
    image_url: str | None = None
    google_place_id: str | None = None


def _normalize_id(value: object) -> str:
    return str(value).strip()


def _find_index(activities: Sequence[Activity], activity_id: str) -> int:
    target = _normalize_id(activity_id)
    for index, activity in enumerate(activities):
        if _normalize_id(activity.id) == target:
            return index
    return -1


def require_activity(day: DayPlan, activity_id: str) -> Activity:
    """Return the activity with the given id.

    Raises:
        ActivityNotFoundError: If the day has no such activity
    """
    index = _find_index(day.activities, activity_id)
    if index == -1:
        raise ActivityNotFoundError(f"No activity with id {activity_id} in day {day.id}")
    return day.activities[index]


def _commit(
    day: DayPlan,
    activities: list[Activity],
    *,
    start_time: str | None = None,
    travel_segments: list[TravelSegment] | None = None,
) -> DayPlan:
    """Recalculate activities and return the new day snapshot."""
    update: dict[str, object] = {}
    if start_time is not None:
        update["start_time"] = start_time
    if travel_segments is not None:
        update["travel_segments"] = travel_segments

    update["activities"] = recalculate_schedule(
        activities,
        start_time or day.start_time,
        travel_segments if travel_segments is not None else day.travel_segments,
    )
    return day.model_copy(update=update)


def add_activity(
    day: DayPlan,
    activity: Activity,
    *,
    after_id: str | None = None,
    at_start: bool = False,
) -> DayPlan:
    """Insert an activity (end of day by default) and recalculate.

    Args:
        day: Current day snapshot
        activity: Activity to insert
        after_id: Insert immediately after this activity, if it exists
        at_start: Insert at index 0 (takes precedence over after_id)
    """
    activities = list(day.activities)
    insert_at = len(activities)
    if at_start:
        insert_at = 0
    elif after_id is not None:
        index = _find_index(activities, after_id)
        if index != -1:
            insert_at = index + 1

    activities.insert(insert_at, activity)
    return _commit(day, activities)


def delete_activity(day: DayPlan, activity_id: str) -> DayPlan:
    """Remove an activity by id.

    Ids are compared as trimmed strings. An unknown id is a silent no-op:
    the returned day has the same activities, which callers may check.
    """
    target = _normalize_id(activity_id)
    activities = [a for a in day.activities if _normalize_id(a.id) != target]

    if len(activities) == len(day.activities):
        logger.warning(
            "Delete ignored: no activity with id %r in day %s (available: %s)",
            activity_id,
            day.id,
            [a.id for a in day.activities],
        )

    return _commit(day, activities)


def update_activity(day: DayPlan, updated: Activity) -> DayPlan:
    """Replace the activity with the same id and recalculate.

    Ids are compared as trimmed strings; an unknown id leaves the list as is.
    """
    activities = list(day.activities)
    index = _find_index(activities, updated.id)
    if index != -1:
        activities[index] = updated
    return _commit(day, activities)


def move_activity(day: DayPlan, index: int, direction: Literal["up", "down"]) -> DayPlan:
    """Swap the activity at index with its neighbour; out of bounds is a no-op."""
    target = index - 1 if direction == "up" else index + 1
    if not (0 <= index < len(day.activities) and 0 <= target < len(day.activities)):
        return day

    activities = list(day.activities)
    activities[index], activities[target] = activities[target], activities[index]
    return _commit(day, activities)


def reorder_activity(day: DayPlan, source_index: int, target_index: int) -> DayPlan:
    """Drag-and-drop: remove at source_index and reinsert at target_index."""
    count = len(day.activities)
    if source_index == target_index or not (0 <= source_index < count and 0 <= target_index < count):
        return day

    activities = list(day.activities)
    moved = activities.pop(source_index)
    activities.insert(target_index, moved)
    return _commit(day, activities)


def sort_by_time(day: DayPlan) -> DayPlan:
    """Stable sort on current start time, then re-flow the schedule.

    HH:mm is zero padded and 24h, so string order equals numeric order.
    """
    return _commit(day, sorted(day.activities, key=lambda a: a.start_time))


def split_activity(day: DayPlan, activity_id: str, parts: Sequence[SplitPart]) -> DayPlan:
    """Replace one activity with len(parts) new ones at the same position.

    Each part gets an equal share of the original duration, at least 60
    minutes. Parts without a resolved location inherit the original's.
    """
    index = _find_index(day.activities, activity_id)
    if index == -1 or not parts:
        return day

    original = day.activities[index]
    start = time_to_minutes(original.start_time)
    span = time_to_minutes(original.end_time) - start
    per_part = max(MIN_SPLIT_DURATION_MIN, span // len(parts))

    replacements: list[Activity] = []
    for i, part in enumerate(parts):
        part_start = start + i * per_part
        replacements.append(
            Activity(
                id=f"split-{original.id}-{i}",
                name=part.name,
                description=f"Split from {original.name}",
                start_time=minutes_to_time(part_start),
                end_time=minutes_to_time(part_start + per_part),
                location=part.location or original.location,
                type=original.type,
                image_url=part.image_url or original.image_url,
                google_place_id=part.google_place_id,
            )
        )

    activities = list(day.activities)
    activities[index : index + 1] = replacements
    return _commit(day, activities)


def accept_suggestion(day: DayPlan, suggestion: Activity) -> DayPlan:
    """Insert a suggested activity according to its suggested_after_id hint.

    "start" inserts at the beginning, a known id inserts right after that
    activity, anything else appends.
    """
    if suggestion.suggested_after_id == START_ID:
        return add_activity(day, suggestion, at_start=True)
    return add_activity(day, suggestion, after_id=suggestion.suggested_after_id)


def apply_optimized_route(day: DayPlan, route: RouteResult) -> DayPlan:
    """Reorder per the solver's permutation and adopt its fresh segments."""
    activities = [day.activities[i] for i in route.order]
    return _commit(day, activities, travel_segments=list(route.segments))


def update_day_start_time(day: DayPlan, start_time: str) -> DayPlan:
    """Change when the day starts and re-flow every unanchored activity."""
    return _commit(day, list(day.activities), start_time=start_time)


def update_city(day: DayPlan, city: str) -> DayPlan:
    return day.model_copy(update={"city": city})


def update_notes(day: DayPlan, notes: str) -> DayPlan:
    return day.model_copy(update={"notes": notes})


def update_accommodation(day: DayPlan, name: str, location: Coordinates | None = None) -> DayPlan:
    """Set the hotel; an omitted location keeps the previously known one."""
    if location is None and day.accommodation is not None:
        location = day.accommodation.location
    return day.model_copy(update={"accommodation": Accommodation(name=name, location=location)})


def replace_day(trip: Trip, day: DayPlan) -> Trip:
    """Return a trip with the day of the same id swapped in."""
    return trip.model_copy(update={"days": [day if d.id == day.id else d for d in trip.days]})


def add_day(trip: Trip, day_id: str, *, default_city: str | None = None) -> Trip:
    """Append a day dated after the last one, inheriting its city.

    A last day without a YYYY-MM-DD date is treated like an empty trip for
    dating purposes: the new day is dated today.
    """
    city = default_city or get_settings().default_city
    new_date = date.today()

    last = trip.days[-1] if trip.days else None
    if last is not None:
        city = last.city
        last_date = parse_iso_date(last.date)
        if last_date is not None:
            new_date = last_date + timedelta(days=1)
        else:
            logger.warning("Day %s has unparsable date %r; dating new day today", last.id, last.date)

    new_day = DayPlan(id=day_id, date=new_date.isoformat(), city=city)
    return trip.model_copy(update={"days": [*trip.days, new_day]})


def delete_day(trip: Trip, day_id: str) -> Trip:
    """Remove a day. A trip always keeps at least one day.

    Raises:
        MutationError: If day_id is the only remaining day
    """
    if trip.find_day(day_id) is None:
        return trip
    if len(trip.days) <= 1:
        raise MutationError("A trip must have at least one day.")
    return trip.model_copy(update={"days": [d for d in trip.days if d.id != day_id]})

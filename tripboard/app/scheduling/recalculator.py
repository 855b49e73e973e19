"""Schedule recalculation - re-derives every activity's start/end time.

Called after every mutation of a day's activity list. Pure apart from reading
defaults from settings: the input list is never mutated and no I/O is
performed.
"""

import math
from collections.abc import Sequence

from tripboard.app.config import get_settings
from tripboard.app.models.trip import Activity, TravelSegment
from tripboard.app.scheduling.timeutils import minutes_to_time, round_up_to_five, time_to_minutes


def effective_duration(activity: Activity, default_min: int | None = None) -> int:
    """Duration used for scheduling, in minutes.

    A positive locked duration always wins. Otherwise the span between the
    activity's current times is used; a zero or negative span (malformed input
    or a nominal cross-midnight activity) becomes default_min, which defaults
    to the default_activity_duration_min setting.
    """
    if activity.locked_duration_minutes and activity.locked_duration_minutes > 0:
        return activity.locked_duration_minutes
    if default_min is None:
        default_min = get_settings().default_activity_duration_min
    duration = time_to_minutes(activity.end_time) - time_to_minutes(activity.start_time)
    return duration if duration > 0 else default_min


def _travel_minutes(
    segments: Sequence[TravelSegment] | None,
    from_id: str,
    to_id: str,
    default_min: int,
) -> int:
    """Travel minutes for the hop from_id -> to_id, or the flat buffer."""
    for segment in segments or ():
        if segment.from_id == from_id and segment.to_id == to_id:
            return math.ceil(segment.duration_value / 60)
    return default_min


def recalculate_schedule(
    activities: Sequence[Activity],
    day_start_time: str | None = None,
    travel_segments: Sequence[TravelSegment] | None = None,
    *,
    default_buffer_min: int | None = None,
    default_duration_min: int | None = None,
    rounding_min: int | None = None,
) -> list[Activity]:
    """Recompute start/end times of a day's activities in list order.

    Rules per activity:
        - locked_start_time: keep the existing start (anchor)
        - first activity: day start, rounded up to rounding_min (5 minutes)
        - otherwise: previous computed end + travel minutes, rounded up.
          Travel minutes come from the segment matching the previous/current
          ids in input order, else default_buffer_min.
        - end = start + effective duration

    Omitted defaults come from settings. Output has the same length and order
    as the input; only start_time and end_time change. Overlapping anchors are
    accepted as-is.
    """
    settings = get_settings()
    if day_start_time is None:
        day_start_time = settings.default_day_start
    if default_buffer_min is None:
        default_buffer_min = settings.default_travel_buffer_min
    if default_duration_min is None:
        default_duration_min = settings.default_activity_duration_min
    if rounding_min is None:
        rounding_min = settings.time_rounding_min

    result: list[Activity] = []

    for index, activity in enumerate(activities):
        duration = effective_duration(activity, default_duration_min)

        if activity.locked_start_time:
            start = time_to_minutes(activity.start_time)
        elif index == 0:
            start = round_up_to_five(time_to_minutes(day_start_time), rounding_min)
        else:
            # Previous *computed* end, not the original one, so edits cascade
            previous_end = time_to_minutes(result[index - 1].end_time)
            travel = _travel_minutes(
                travel_segments, activities[index - 1].id, activity.id, default_buffer_min
            )
            start = round_up_to_five(previous_end + travel, rounding_min)

        result.append(
            activity.model_copy(
                update={
                    "start_time": minutes_to_time(start),
                    "end_time": minutes_to_time(start + duration),
                }
            )
        )

    return result

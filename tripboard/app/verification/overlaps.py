"""Schedule advisories for the display layer.

The recalculator accepts overlapping anchors silently. These checks only
report what a renderer may want to flag; they never change the schedule.
"""

from tripboard.app.models.trip import DayPlan
from tripboard.app.models.violations import Violation, ViolationKind, ViolationSeverity
from tripboard.app.scheduling.timeutils import MINUTES_PER_DAY, relative_minutes, time_to_minutes


def find_overlaps(day: DayPlan) -> list[Violation]:
    """Report consecutive activities whose time ranges collide.

    Times are compared relative to the day start, so the small hours count
    as after midnight and an end time that wraps past 24:00 stays late.

    Args:
        day: Day after recalculation

    Returns:
        One ADVISORY violation per colliding pair (empty if none)
    """
    violations: list[Violation] = []

    for current, following in zip(day.activities, day.activities[1:]):
        current_start = relative_minutes(current.start_time, day.start_time)
        span = (time_to_minutes(current.end_time) - time_to_minutes(current.start_time)) % MINUTES_PER_DAY
        current_end = current_start + span
        following_start = relative_minutes(following.start_time, day.start_time)
        if following_start >= current_end:
            continue

        anchored = current.locked_start_time or following.locked_start_time
        violations.append(
            Violation(
                kind=ViolationKind.OVERLAP,
                code="ANCHOR_OVERLAP" if anchored else "SCHEDULE_OVERLAP",
                message=f"{following.name} starts before {current.name} ends.",
                severity=ViolationSeverity.ADVISORY,
                affected_activity_ids=[current.id, following.id],
                details={
                    "end_time": current.end_time,
                    "next_start_time": following.start_time,
                    "overlap_minutes": current_end - following_start,
                },
            )
        )

    return violations


def find_overnight_activities(day: DayPlan) -> list[Violation]:
    """Report activities whose end time is not after their start time.

    Such spans are scheduled with the 60 minute fallback duration unless
    their duration is locked, which may shorten an intended overnight stay.
    """
    violations: list[Violation] = []

    for activity in day.activities:
        if activity.locked_duration_minutes:
            continue
        if time_to_minutes(activity.end_time) > time_to_minutes(activity.start_time):
            continue
        violations.append(
            Violation(
                kind=ViolationKind.OVERNIGHT,
                code="CROSSES_MIDNIGHT",
                message=f"{activity.name} ends at or before its start time.",
                severity=ViolationSeverity.ADVISORY,
                affected_activity_ids=[activity.id],
                details={"start_time": activity.start_time, "end_time": activity.end_time},
            )
        )

    return violations

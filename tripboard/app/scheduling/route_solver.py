"""Route ordering: nearest-neighbour tour partitioned by time anchors.

Anchored activities (locked start time) split the day into slots. Flexible
activities are assigned to the slot ending at the first anchor that starts
after them, then each slot is visited greedily by great-circle distance.
Pure and synchronous; travel times are fetched elsewhere.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from tripboard.app.config import get_settings
from tripboard.app.models.common import Coordinates
from tripboard.app.models.trip import Activity
from tripboard.app.scheduling.timeutils import relative_minutes

EARTH_RADIUS_M = 6371e3


def haversine_m(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two coordinates, in metres."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


@dataclass
class _Slot:
    """Flexible activities visited before the terminating anchor (if any)."""

    anchor_index: int | None
    flexible: list[int] = field(default_factory=list)


def solve_order(
    origin: Coordinates,
    activities: Sequence[Activity],
    day_start_time: str | None = None,
) -> list[int]:
    """Return a permutation of activity indices for the day.

    Args:
        origin: Where the day starts (accommodation or first stop)
        activities: Activities in their current order
        day_start_time: HH:mm; earlier times are treated as after midnight

    Returns:
        Indices into activities in visiting order. Anchors always appear in
        time order; ties in distance go to the earliest index.
    """
    if not activities:
        return []
    if day_start_time is None:
        day_start_time = get_settings().default_day_start

    def rel(index: int) -> int:
        return relative_minutes(activities[index].start_time, day_start_time)

    # sorted() is stable, so anchors at the same time keep input order
    anchors = sorted(
        (i for i, act in enumerate(activities) if act.locked_start_time),
        key=rel,
    )
    anchor_times = [rel(i) for i in anchors]

    slots = [_Slot(anchor_index=i) for i in anchors]
    slots.append(_Slot(anchor_index=None))

    for i, act in enumerate(activities):
        if act.locked_start_time:
            continue
        nominal = rel(i)
        slot_index = next(
            (n for n, anchor_time in enumerate(anchor_times) if anchor_time > nominal),
            len(anchors),
        )
        slots[slot_index].flexible.append(i)

    order: list[int] = []
    position = origin

    for slot in slots:
        remaining = list(slot.flexible)
        while remaining:
            nearest = min(remaining, key=lambda i: haversine_m(position, activities[i].location))
            remaining.remove(nearest)
            order.append(nearest)
            position = activities[nearest].location

        if slot.anchor_index is not None:
            order.append(slot.anchor_index)
            position = activities[slot.anchor_index].location

    return order

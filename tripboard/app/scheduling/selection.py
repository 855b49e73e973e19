"""Travel-segment selection between competing walking and transit estimates."""

from tripboard.app.config import get_settings
from tripboard.app.models.common import TravelMode
from tripboard.app.models.tool_results import TravelEstimate
from tripboard.app.models.trip import TravelSegment

_MODE_LABELS = {
    TravelMode.WALKING: "Walk",
    TravelMode.TRAIN: "Train",
    TravelMode.BUS: "Bus",
    TravelMode.TRANSIT: "Transit",
    TravelMode.DRIVING: "Drive",
}


def segment_from_estimate(estimate: TravelEstimate, from_id: str, to_id: str) -> TravelSegment:
    """Turn a provider estimate into a segment for the hop from_id -> to_id."""
    return TravelSegment(
        from_id=from_id,
        to_id=to_id,
        mode=estimate.mode,
        duration=estimate.duration_text,
        duration_value=estimate.duration_seconds,
        distance=estimate.distance_text,
        transit_fare=estimate.fare_amount if estimate.fare_amount else None,
    )


def placeholder_segment(from_id: str, to_id: str) -> TravelSegment:
    """Zero-duration segment for a hop with no travel data."""
    return TravelSegment(
        from_id=from_id,
        to_id=to_id,
        mode=TravelMode.WALKING,
        duration="?",
        duration_value=0,
    )


def _with_alternative(primary: TravelSegment, other: TravelSegment) -> TravelSegment:
    label = _MODE_LABELS.get(other.mode, other.mode.value.title())
    return primary.model_copy(
        update={
            "alternative_mode": other.mode,
            "alternative_duration": other.duration,
            "alternative_label": f"{label}: {other.duration}",
        }
    )


def select_segment(
    walking: TravelSegment | None,
    transit: TravelSegment | None,
    *,
    walk_max_min: int | None = None,
    close_match_min: int | None = None,
) -> TravelSegment | None:
    """Pick the primary segment for a leg.

    Rules, in order:
        1. Walking longer than walk_max_min: transit
        2. Transit faster by more than close_match_min: transit
        3. Walking faster by more than close_match_min: walking
        4. Otherwise competitive: the faster one (transit on ties), with the
           other attached as the alternative

    Thresholds default to the walk_max_min and close_match_min settings.
    With a single estimate that one is returned unchanged; with none, None.
    """
    if walking is None or transit is None:
        return walking or transit

    settings = get_settings()
    if walk_max_min is None:
        walk_max_min = settings.walk_max_min
    if close_match_min is None:
        close_match_min = settings.close_match_min

    walk_s = walking.duration_value
    transit_s = transit.duration_value
    close_s = close_match_min * 60

    if walk_s > walk_max_min * 60:
        return transit
    if transit_s < walk_s - close_s:
        return transit
    if walk_s < transit_s - close_s:
        return walking

    if transit_s <= walk_s:
        return _with_alternative(transit, walking)
    return _with_alternative(walking, transit)

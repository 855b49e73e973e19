"""Models package - re-exports for convenience."""

from tripboard.app.models.common import (
    ActivityType,
    Coordinates,
    Provenance,
    TravelMode,
    default_coordinates,
)
from tripboard.app.models.tool_results import DayForecast, PlaceResult, RouteResult, TravelEstimate
from tripboard.app.models.trip import (
    START_ID,
    Accommodation,
    Activity,
    ActivityPricing,
    DayPlan,
    PriceEntry,
    TravelSegment,
    Trip,
)
from tripboard.app.models.violations import Violation, ViolationKind, ViolationSeverity

__all__ = [
    # Common
    "Coordinates",
    "TravelMode",
    "ActivityType",
    "Provenance",
    "default_coordinates",
    # Trip
    "START_ID",
    "Activity",
    "ActivityPricing",
    "PriceEntry",
    "TravelSegment",
    "Accommodation",
    "DayPlan",
    "Trip",
    # Provider results
    "TravelEstimate",
    "PlaceResult",
    "RouteResult",
    "DayForecast",
    # Violations
    "Violation",
    "ViolationKind",
    "ViolationSeverity",
]

"""Trip models - days, activities and the travel segments between them."""

from pydantic import BaseModel, Field

from tripboard.app.config import get_settings
from tripboard.app.models.common import ActivityType, Coordinates, TravelMode, default_coordinates

START_ID = "start"  # fromId sentinel for the day's origin (accommodation)


class PriceEntry(BaseModel):
    """One price tier, e.g. Adult or Child."""

    label: str
    amount: float
    currency: str = "JPY"


class ActivityPricing(BaseModel):
    """Detailed pricing for an activity."""

    is_free: bool | None = None
    base_price: float | None = None
    price_entries: list[PriceEntry] = Field(default_factory=list)
    price_link: str | None = None
    price_notes: str | None = None
    last_updated: str | None = None


class Activity(BaseModel):
    """One scheduled stop in a day.

    start_time/end_time are wall-clock HH:mm in day-local time. When
    locked_start_time is set the start time is an anchor that neither the
    recalculator nor the route solver may move. locked_duration_minutes, when
    set, overrides the duration derived from the current times.
    """

    id: str
    name: str
    description: str = ""
    start_time: str = "09:00"
    end_time: str = "10:00"
    location: Coordinates = Field(default_factory=default_coordinates)
    type: ActivityType = ActivityType.sightseeing
    cost_estimate: float | None = None
    pricing: ActivityPricing | None = None
    image_url: str | None = None
    link: str | None = None
    sub_activities: list[str] | None = None
    duration_reasoning: str | None = None
    suggested_after_id: str | None = None
    google_place_id: str | None = None
    locked_start_time: bool = False
    locked_duration_minutes: int | None = None


class TravelSegment(BaseModel):
    """Directed edge between two consecutive stops of a day."""

    from_id: str
    to_id: str
    mode: TravelMode
    duration: str  # Display text, e.g. "15 min"
    duration_value: int  # Seconds; the only field the recalculator reads
    distance: str | None = None
    transit_fare: float | None = None
    alternative_mode: TravelMode | None = None
    alternative_duration: str | None = None
    alternative_label: str | None = None


class Accommodation(BaseModel):
    """Where the day starts."""

    name: str
    location: Coordinates | None = None


class DayPlan(BaseModel):
    """One calendar day of the trip."""

    id: str
    date: str  # YYYY-MM-DD
    city: str
    start_time: str = Field(default_factory=lambda: get_settings().default_day_start)
    accommodation: Accommodation | None = None
    activities: list[Activity] = Field(default_factory=list)
    travel_segments: list[TravelSegment] | None = None
    notes: str | None = None


class Trip(BaseModel):
    """Ordered list of days plus a title; the single mutable root."""

    title: str
    days: list[DayPlan]

    def find_day(self, day_id: str) -> DayPlan | None:
        """Return the day with the given id, if present."""
        for day in self.days:
            if day.id == day_id:
                return day
        return None

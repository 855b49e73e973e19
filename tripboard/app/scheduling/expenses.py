"""Expense totals per day and per trip."""

from dataclasses import dataclass, field

from tripboard.app.models.trip import DayPlan, Trip


@dataclass
class ExpenseSummary:
    """Attraction prices plus transit fares, in the trip currency (Yen)."""

    total: float = 0.0
    attractions: float = 0.0
    transit: float = 0.0
    by_type: dict[str, float] = field(default_factory=dict)


def calculate_day_expenses(day: DayPlan) -> ExpenseSummary:
    """Sum activity base prices and segment fares for one day."""
    summary = ExpenseSummary()

    for activity in day.activities:
        cost = (activity.pricing.base_price if activity.pricing else None) or 0.0
        summary.attractions += cost
        type_key = activity.type.value
        summary.by_type[type_key] = summary.by_type.get(type_key, 0.0) + cost

    for segment in day.travel_segments or []:
        summary.transit += segment.transit_fare or 0.0

    summary.total = summary.attractions + summary.transit
    return summary


def calculate_trip_expenses(trip: Trip) -> ExpenseSummary:
    """Aggregate day summaries across the whole trip."""
    total = ExpenseSummary()
    for day in trip.days:
        day_summary = calculate_day_expenses(day)
        total.attractions += day_summary.attractions
        total.transit += day_summary.transit
        for type_key, cost in day_summary.by_type.items():
            total.by_type[type_key] = total.by_type.get(type_key, 0.0) + cost

    total.total = total.attractions + total.transit
    return total

"""Starter trip used when no snapshot has been saved yet."""

import asyncio

from tripboard.app.config import get_settings
from tripboard.app.db.repositories import JsonFileTripRepository
from tripboard.app.models.common import ActivityType, Coordinates
from tripboard.app.models.trip import Activity, DayPlan, Trip
from tripboard.app.scheduling.recalculator import recalculate_schedule


def starter_trip() -> Trip:
    """A one-day Tokyo trip with three stops, already recalculated."""
    activities = [
        Activity(
            id="act-1-1",
            name="Shibuya Crossing",
            description="The famous scramble crossing.",
            start_time="10:00",
            end_time="11:00",
            location=Coordinates(lat=35.6595, lng=139.7004),
            type=ActivityType.sightseeing,
        ),
        Activity(
            id="act-1-2",
            name="Nintendo Tokyo / Pokemon Center",
            description="Shopping at Shibuya Parco.",
            start_time="11:30",
            end_time="13:30",
            location=Coordinates(lat=35.6620, lng=139.6986),
            type=ActivityType.shopping,
        ),
        Activity(
            id="act-1-3",
            name="Tokyo Skytree",
            description="Views of the city at sunset.",
            start_time="16:00",
            end_time="18:00",
            location=Coordinates(lat=35.7100, lng=139.8107),
            type=ActivityType.sightseeing,
            locked_start_time=True,
        ),
    ]
    day = DayPlan(
        id="day-1",
        date="2025-02-03",
        city="Tokyo",
        start_time="10:00",
        activities=recalculate_schedule(activities, "10:00"),
    )
    return Trip(title="Japan Adventure", days=[day])


async def seed_trip_file() -> None:
    """Write the starter trip to TRIP_DATA_PATH unless a trip already exists.

    This function is idempotent - safe to run multiple times.
    """
    settings = get_settings()
    if not settings.trip_data_path:
        print("TRIP_DATA_PATH not set; nothing to seed")
        return

    repository = JsonFileTripRepository(settings.trip_data_path)
    if await repository.load() is not None:
        print(f"Trip already exists at {settings.trip_data_path}")
        return

    await repository.save(starter_trip())
    print(f"✅ Seeded starter trip at {settings.trip_data_path}")


if __name__ == "__main__":
    asyncio.run(seed_trip_file())

"""Trip store - serializes mutations per day and publishes snapshots.

Mutation handlers are pure; this is where their results become the current
state. One asyncio.Lock per day id means two concurrent edits of the same day
run one after the other, each seeing the other's committed result.
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable

from tripboard.app.db.repositories import TripRepository
from tripboard.app.models.trip import DayPlan, Trip
from tripboard.app.scheduling.mutations import replace_day

logger = logging.getLogger(__name__)

DayMutation = Callable[[DayPlan], DayPlan | Awaitable[DayPlan]]
TripMutation = Callable[[Trip], Trip]


class TripNotFoundError(Exception):
    """No trip has been created or loaded yet."""


class DayNotFoundError(Exception):
    """The requested day does not exist in the trip."""


class TripStore:
    """Owns the current trip snapshot and its persistence."""

    def __init__(self, repository: TripRepository) -> None:
        self._repository = repository
        self._day_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._trip_lock = asyncio.Lock()

    async def get_trip(self) -> Trip:
        trip = await self._repository.load()
        if trip is None:
            raise TripNotFoundError("No trip saved yet")
        return trip

    async def get_day(self, day_id: str) -> DayPlan:
        day = (await self.get_trip()).find_day(day_id)
        if day is None:
            raise DayNotFoundError(f"Day {day_id} not found")
        return day

    async def put_trip(self, trip: Trip) -> Trip:
        """Replace the whole trip (initial load or import)."""
        async with self._trip_lock:
            await self._repository.save(trip)
        return trip

    async def mutate_trip(self, mutation: TripMutation) -> Trip:
        """Apply a trip-level mutation (add/delete day) atomically."""
        async with self._trip_lock:
            trip = mutation(await self.get_trip())
            await self._repository.save(trip)
            return trip

    async def mutate_day(self, day_id: str, mutation: DayMutation) -> DayPlan:
        """Run mutation against the latest snapshot of a day and commit it.

        The mutation may be sync or async (e.g. route optimization); the day
        lock is held for the whole read-modify-write cycle.
        """
        async with self._day_locks[day_id]:
            day = await self.get_day(day_id)
            result = mutation(day)
            new_day = await result if inspect.isawaitable(result) else result

            async with self._trip_lock:
                # Re-read so edits to other days committed meanwhile are kept
                trip = await self.get_trip()
                if trip.find_day(day_id) is None:
                    raise DayNotFoundError(f"Day {day_id} was deleted")
                await self._repository.save(replace_day(trip, new_day))

            logger.info("Committed mutation for day %s (%d activities)", day_id, len(new_day.activities))
            return new_day

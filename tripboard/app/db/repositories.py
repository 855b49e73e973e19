"""Trip persistence - repository protocol plus in-memory and JSON file sinks."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Protocol

from tripboard.app.models.trip import Trip

logger = logging.getLogger(__name__)


class TripRepository(Protocol):
    """Stores the single trip snapshot."""

    async def load(self) -> Trip | None:
        """Return the stored trip, or None if nothing was saved yet."""
        ...

    async def save(self, trip: Trip) -> None:
        """Replace the stored trip with this snapshot."""
        ...


class InMemoryTripRepository:
    """In-memory implementation of TripRepository."""

    def __init__(self, trip: Trip | None = None) -> None:
        self._trip = trip

    async def load(self) -> Trip | None:
        return self._trip

    async def save(self, trip: Trip) -> None:
        self._trip = trip


class JsonFileTripRepository:
    """Trip snapshot persisted as an indented JSON document."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    async def load(self) -> Trip | None:
        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        return Trip.model_validate(json.loads(raw))

    async def save(self, trip: Trip) -> None:
        payload = trip.model_dump_json(indent=2)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        await asyncio.to_thread(tmp_path.write_text, payload, encoding="utf-8")
        await asyncio.to_thread(tmp_path.replace, self._path)
        logger.debug("Saved trip snapshot to %s", self._path)

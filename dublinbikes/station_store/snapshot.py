"""In-process station store loaded once from the bulk seed."""

import threading
from pathlib import Path
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from dublinbikes.models import Station, resolve_timezone
from dublinbikes.seed import load_stations
from dublinbikes.station_store.base import StationStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="station_store/snapshot")


class SnapshotStationStore(StationStore):
    """Single list behind one lock; every operation holds the lock for its whole duration."""

    backend_name = "snapshot"

    def __init__(self, stations: Iterable[Station] = (), local_tz: ZoneInfo | str | None = None) -> None:
        self.local_tz = resolve_timezone(local_tz)
        self._stations: List[Station] = list(stations)
        self._lock = threading.Lock()
        logger.debug("Initialized SnapshotStationStore with %d stations", len(self._stations))

    @classmethod
    def from_source(cls, source: str | Path, local_tz: ZoneInfo | str | None = None) -> "SnapshotStationStore":
        """Build the store from the seed; SeedDataError propagates, there is no empty fallback."""
        return cls(load_stations(source, local_tz), local_tz=local_tz)

    def get_all(self) -> List[Station]:
        with self._lock:
            return list(self._stations)

    def get_by_number(self, number: int) -> Optional[Station]:
        with self._lock:
            return next((s for s in self._stations if s.number == number), None)

    def get_by_id(self, station_id: str) -> Optional[Station]:
        with self._lock:
            return next((s for s in self._stations if s.id == station_id), None)

    def add(self, station: Station) -> Station:
        stored = station.touched(self.local_tz)
        with self._lock:
            self._stations.append(stored)
        return stored

    def update(self, station: Station) -> bool:
        stored = station.touched(self.local_tz)
        with self._lock:
            for idx, existing in enumerate(self._stations):
                if existing.number == stored.number:
                    self._stations[idx] = stored
                    return True
        return False

    def replace_all(self, stations: Iterable[Station]) -> None:
        new_list = list(stations)
        with self._lock:
            self._stations = new_list

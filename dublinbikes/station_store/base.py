"""Shared protocol for station storage backends."""

from typing import Iterable, List, Optional, Protocol

from dublinbikes.models import Station


class StationStore(Protocol):
    """Protocol for station storage backends."""

    backend_name: str

    def get_all(self) -> List[Station]:
        """Return a full point-in-time copy of the dataset."""

    def get_by_number(self, number: int) -> Optional[Station]:
        """Fetch a station by its public number, or None."""

    def get_by_id(self, station_id: str) -> Optional[Station]:
        """Fetch a station by its canonical id, or None."""

    def add(self, station: Station) -> Station:
        """Stamp and persist a new station, returning the stored record."""

    def update(self, station: Station) -> bool:
        """Stamp and replace a station matched by the backend's key; False on a miss."""

    def replace_all(self, stations: Iterable[Station]) -> None:
        """Replace the whole dataset (records are stored as given, not restamped)."""

"""Station storage backends."""

from .base import StationStore
from .document import DocumentStationStore
from .snapshot import SnapshotStationStore

__all__ = [
    "StationStore",
    "DocumentStationStore",
    "SnapshotStationStore",
]

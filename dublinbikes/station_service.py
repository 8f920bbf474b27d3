"""Station service: the query/lookup/mutation contract over one store.

Each service binds a store to the shared `ResultCache`. Query results are
cached under `(backend_name, params)` so two services sharing a cache never
serve each other's results, while any mutation through either one
invalidates the whole cache.
"""

from typing import Optional

from dublinbikes.errors import StationValidationError
from dublinbikes.models import Station, StationSummary, StationView
from dublinbikes.query_engine import QueryParams, QueryResult, run_query
from dublinbikes.result_cache import ResultCache
from dublinbikes.station_store import StationStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="station_service")


class StationService:
    """Query, lookup and mutate stations held by a single store."""

    def __init__(self, store: StationStore, cache: ResultCache) -> None:
        self.store = store
        self.cache = cache

    @property
    def backend_name(self) -> str:
        return self.store.backend_name

    def query(self, params: QueryParams | None = None) -> QueryResult:
        """Filtered, sorted, paged view; served from cache until the next mutation."""
        params = (params or QueryParams()).normalized()
        key = (self.backend_name, params.cache_key())
        return self.cache.get_or_compute(key, lambda: run_query(self.store.get_all(), params))

    def get_by_number(self, number: int) -> Optional[StationView]:
        station = self.store.get_by_number(number)
        return StationView.from_station(station) if station else None

    def get_by_id(self, station_id: str) -> Optional[StationView]:
        station = self.store.get_by_id(station_id)
        return StationView.from_station(station) if station else None

    def create(self, station: Station) -> Station:
        """Validate, persist and invalidate; returns the record as the store stamped it.

        Validation failures write nothing and leave the cache untouched.
        """
        if station.bike_stands < 0:
            raise StationValidationError("bike_stands must be >= 0")
        stored = self.store.add(station)
        self.cache.invalidate()
        logger.info("Added station", extra={"backend": self.backend_name, "station_id": stored.id})
        return stored

    def add(self, station: Station) -> bool:
        self.create(station)
        return True

    def update(self, station: Station) -> bool:
        """Replace a station; returns False when no station matched."""
        ok = self.store.update(station)
        self.cache.invalidate()
        if not ok:
            logger.debug("Update matched no station", extra={"backend": self.backend_name, "number": station.number})
        return ok

    def summary(self) -> StationSummary:
        """Fleet totals over one snapshot; status counts group on the upper-cased status."""
        stations = self.store.get_all()
        counts: dict[str, int] = {}
        for s in stations:
            status = (s.status or "").upper()
            counts[status] = counts.get(status, 0) + 1
        return StationSummary(
            total_stations=len(stations),
            total_bike_stands=sum(s.bike_stands for s in stations),
            total_available_bikes=sum(s.available_bikes for s in stations),
            counts_by_status=counts,
        )

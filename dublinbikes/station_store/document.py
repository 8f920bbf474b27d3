"""Station store over a partitioned document database.

The partition key decides which lookups are cheap. With the default "/id",
`get_by_id` and `update` are single-partition point operations while
`get_by_number` has to query every partition. Partitioning on "/number"
flips that trade-off.
"""

from pathlib import Path
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from dublinbikes.document_db import (
    DocumentConflictError,
    DocumentContainer,
    DocumentDatabaseClient,
    DocumentDbError,
    DocumentNotFoundError,
)
from dublinbikes.errors import DuplicateStationError, SeedDataError, StationStoreError
from dublinbikes.models import Station, resolve_timezone
from dublinbikes.seed import load_stations
from dublinbikes.station_store.base import StationStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="station_store/document")


class DocumentStationStore(StationStore):
    """Facade that maps the station contract onto document point reads and queries."""

    backend_name = "document"

    def __init__(
        self,
        client: DocumentDatabaseClient,
        *,
        database_id: str = "DublinBikesDb",
        container_id: str = "BikeStations",
        partition_key_path: str = "/id",
        local_tz: ZoneInfo | str | None = None,
    ) -> None:
        logger.debug("Initializing DocumentStationStore")
        self.client = client
        self.database_id = database_id
        self.container_id = container_id
        self.partition_key_path = partition_key_path
        self.local_tz = resolve_timezone(local_tz)
        self._container: DocumentContainer | None = None

    @property
    def container(self) -> DocumentContainer:
        if self._container is None:
            raise StationStoreError("DocumentStationStore used before initialize()")
        return self._container

    def initialize(self, seed_source: str | Path | None = None) -> int:
        """Create the database/container if absent and seed them when empty.

        Returns the number of stations inserted (0 when the container already
        had data or no seed file is available).
        """
        try:
            if self.client.create_database_if_not_exists(self.database_id):
                logger.info("Created document database", extra={"database": self.database_id})
            self._container = self.client.create_container_if_not_exists(
                self.database_id, self.container_id, self.partition_key_path
            )
            self.partition_key_path = self._container.partition_key_path
            if self._container.has_items():
                logger.info("Document container already populated; skipping seed")
                return 0
        except DocumentDbError as exc:
            raise StationStoreError(f"Failed to bootstrap document store: {exc}") from exc

        if seed_source is None:
            return 0
        try:
            stations = load_stations(seed_source, self.local_tz)
        except SeedDataError as exc:
            logger.warning("Document store seed unavailable; container left empty", extra={"error": str(exc)})
            return 0

        inserted = 0
        for station in stations:
            try:
                self.container.create_item(station.to_record())
                inserted += 1
            except DocumentConflictError:
                continue
            except DocumentDbError as exc:
                raise StationStoreError(f"Failed to seed station {station.id}: {exc}") from exc
        logger.info("Seeded document store with %d stations", inserted)
        return inserted

    def _partition_field(self) -> str:
        return self.partition_key_path.lstrip("/")

    def _to_station(self, doc) -> Station:
        try:
            return Station.model_validate(doc, context={"local_tz": self.local_tz})
        except ValidationError as exc:
            raise StationStoreError(f"Corrupt station document: {exc}") from exc

    def _first(self, field: str, value) -> Optional[Station]:
        """Cross-partition query on a field that is not the partition key."""
        try:
            docs = self.container.query_items(field, value)
        except DocumentDbError as exc:
            raise StationStoreError(f"Query on {field} failed: {exc}") from exc
        return self._to_station(docs[0]) if docs else None

    def _point_read(self, item_id: str, partition_key) -> Optional[Station]:
        try:
            return self._to_station(self.container.read_item(item_id, partition_key))
        except DocumentNotFoundError:
            return None
        except DocumentDbError as exc:
            raise StationStoreError(f"Read of {item_id} failed: {exc}") from exc

    def get_all(self) -> List[Station]:
        try:
            docs = self.container.list_items()
        except DocumentDbError as exc:
            raise StationStoreError(f"Listing stations failed: {exc}") from exc
        return [self._to_station(doc) for doc in docs]

    def get_by_number(self, number: int) -> Optional[Station]:
        if self._partition_field() == "number":
            try:
                docs = self.container.read_partition(number)
            except DocumentDbError as exc:
                raise StationStoreError(f"Read of partition {number} failed: {exc}") from exc
            return self._to_station(docs[0]) if docs else None
        return self._first("number", number)

    def get_by_id(self, station_id: str) -> Optional[Station]:
        if self._partition_field() == "id":
            return self._point_read(station_id, station_id)
        return self._first("id", station_id)

    def add(self, station: Station) -> Station:
        stored = station.touched(self.local_tz)
        try:
            self.container.create_item(stored.to_record())
        except DocumentConflictError as exc:
            raise DuplicateStationError(f"Station {stored.id} already exists") from exc
        except DocumentDbError as exc:
            raise StationStoreError(f"Add of {stored.id} failed: {exc}") from exc
        return stored

    def update(self, station: Station) -> bool:
        stored = station.touched(self.local_tz)
        try:
            self.container.replace_item(stored.id, stored.to_record())
        except DocumentNotFoundError:
            return False
        except DocumentDbError as exc:
            raise StationStoreError(f"Update of {stored.id} failed: {exc}") from exc
        return True

    def replace_all(self, stations: Iterable[Station]) -> None:
        try:
            for station in stations:
                self.container.upsert_item(station.to_record())
        except DocumentDbError as exc:
            raise StationStoreError(f"Replace-all failed: {exc}") from exc

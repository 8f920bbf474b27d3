"""Factory helpers that build the stores, shared cache, services and feed at startup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dublinbikes import config
from dublinbikes.document_db import DocumentDatabaseClient, InMemoryDocumentClient, RedisDocumentClient
from dublinbikes.feed_mutator import FeedMutator
from dublinbikes.result_cache import ResultCache
from dublinbikes.station_service import StationService
from dublinbikes.station_store import DocumentStationStore, SnapshotStationStore
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="factory")


@dataclass
class StationServices:
    """Everything the HTTP layer needs, sharing one ResultCache."""
    cache: ResultCache
    snapshot: StationService
    document: StationService
    feed: Optional[FeedMutator]

    def for_version(self, version: str) -> StationService:
        """Map an API version to its backend: v1 is the snapshot store, v2 the document store."""
        if version == "v1":
            return self.snapshot
        if version == "v2":
            return self.document
        raise ValueError(f"Unknown API version '{version}'")

    def shutdown(self) -> None:
        if self.feed is not None:
            self.feed.stop(timeout=5)


def build_document_client(settings: config.Settings) -> DocumentDatabaseClient:
    """Redis when a URL is configured, otherwise the in-process client."""
    if settings.document_redis_url:
        logger.info("Using Redis document database", extra={"redis_url": mask_url(settings.document_redis_url)})
        return RedisDocumentClient.from_url(settings.document_redis_url)
    logger.info("Using in-memory document database")
    return InMemoryDocumentClient()


def build_services(
    settings: config.Settings | None = None,
    *,
    document_client: DocumentDatabaseClient | None = None,
) -> StationServices:
    """Load the snapshot store, bootstrap the document store and wire the shared cache."""
    settings = settings or config.settings
    cache = ResultCache(ttl_seconds=settings.cache_ttl_seconds)

    snapshot_store = SnapshotStationStore.from_source(settings.seed_source, local_tz=settings.local_timezone)

    document_store = DocumentStationStore(
        document_client or build_document_client(settings),
        database_id=settings.document_database_id,
        container_id=settings.document_container_id,
        partition_key_path=settings.document_partition_key,
        local_tz=settings.local_timezone,
    )
    document_store.initialize(settings.document_seed_source)

    feed = None
    if settings.updater_enabled:
        target = snapshot_store if settings.updater_backend == "snapshot" else document_store
        feed = FeedMutator(
            target,
            cache,
            interval_ms=settings.updater_interval_ms,
            local_tz=settings.local_timezone,
        )

    return StationServices(
        cache=cache,
        snapshot=StationService(snapshot_store, cache),
        document=StationService(document_store, cache),
        feed=feed,
    )

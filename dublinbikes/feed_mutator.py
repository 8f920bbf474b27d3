"""Background worker that simulates the live availability feed.

Every interval it redraws capacity and availability for every station, writes
the new dataset with `replace_all` and invalidates the shared result cache. A
failed tick is logged and the loop carries on; only `stop()` ends it.
"""

from __future__ import annotations

import random
import threading
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from dublinbikes.models import Station, now_pair, resolve_timezone
from dublinbikes.result_cache import ResultCache
from dublinbikes.station_store import StationStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="feed_mutator")

DEFAULT_INTERVAL_MS = 12000
DEFAULT_MAX_CAPACITY_DELTA = 3


def perturb_station(
    station: Station,
    rng: random.Random,
    stamp: tuple[datetime, datetime],
    max_delta: int = DEFAULT_MAX_CAPACITY_DELTA,
) -> Station:
    """Return a copy with wiggled capacity, redrawn availability and new timestamps."""
    capacity = max(1, station.bike_stands + rng.randint(-max_delta, max_delta))
    bikes = rng.randint(0, capacity)
    utc, local = stamp
    return station.model_copy(
        update={
            "bike_stands": capacity,
            "available_bikes": bikes,
            "available_bike_stands": capacity - bikes,
            "last_update_utc": utc,
            "last_update_local": local,
        }
    )


class FeedMutator:
    """Periodically rewrites one store's dataset on a daemon thread."""

    def __init__(
        self,
        store: StationStore,
        cache: ResultCache,
        *,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        rng: Optional[random.Random] = None,
        max_capacity_delta: int = DEFAULT_MAX_CAPACITY_DELTA,
        local_tz: ZoneInfo | str | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.interval_ms = interval_ms
        self.rng = rng or random.Random()
        self.max_capacity_delta = max_capacity_delta
        self.local_tz = resolve_timezone(local_tz)
        self.ticks = 0
        self.failures = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> int:
        """Run one update pass; returns how many stations were written."""
        current = self.store.get_all()
        stamp = now_pair(self.local_tz)
        updated: List[Station] = [
            perturb_station(s, self.rng, stamp, self.max_capacity_delta) for s in current
        ]
        self.store.replace_all(updated)
        self.cache.invalidate()
        self.ticks += 1
        logger.debug("Feed mutator updated %d stations", len(updated))
        return len(updated)

    def _run(self) -> None:
        logger.info("Feed mutator started, interval %dms", self.interval_ms)
        while not self._stop.is_set():
            try:
                self.tick()
            except Exception:
                self.failures += 1
                logger.exception("Feed mutator tick failed")
            if self._stop.wait(self.interval_ms / 1000):
                break
        logger.info("Feed mutator stopped")

    def start(self) -> None:
        """Start the background thread; no-op if it is already running."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"feed-mutator-{self.store.backend_name}", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to exit and wait for the thread.

        If the join times out the thread is kept, so `running` stays True and
        `start()` does not launch a second loop beside it.
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self._thread = None

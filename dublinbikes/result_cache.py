"""Read-through cache for query results with generation-based bulk invalidation.

Entries are never enumerated. Each one remembers the generation token that
was current when its computation started; `invalidate()` cancels that token
and installs a new one, so every older entry is stale on its next lookup. A
TTL bounds entry age in case some mutation path ever skips invalidation.
"""

import itertools
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, TypeVar

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="result_cache")

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300.0


class GenerationToken:
    """Cancellable marker for one cache era."""

    def __init__(self, number: int) -> None:
        self.number = number
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()


@dataclass
class CacheEntry:
    value: Any
    generation: GenerationToken
    written_at: float


class ResultCache:
    """Thread-safe memo keyed by any hashable key, shared by every station service."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        self.ttl = ttl_seconds
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self._generation = GenerationToken(next(self._counter))

    @property
    def generation(self) -> int:
        """Number of the current generation token."""
        return self._generation.number

    def _fresh(self, entry: CacheEntry, now: float) -> bool:
        if entry.generation.cancelled or entry.generation is not self._generation:
            return False
        return now - entry.written_at < self.ttl

    def get(self, key: Hashable) -> Any | None:
        """Return a fresh cached value or None; stale entries are dropped."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._fresh(entry, time.monotonic()):
                self._entries.pop(key, None)
                return None
            return entry.value

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        """Return the cached value for `key`, computing and storing it on a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if self._fresh(entry, time.monotonic()):
                    return entry.value
                self._entries.pop(key, None)
            generation = self._generation

        value = compute()

        with self._lock:
            # an invalidation ran while computing; the value may predate it
            if not generation.cancelled:
                self._entries[key] = CacheEntry(value=value, generation=generation, written_at=time.monotonic())
        return value

    def invalidate(self) -> int:
        """Retire the current generation and drop the entries written under it."""
        with self._lock:
            old = self._generation
            self._generation = GenerationToken(next(self._counter))
            self._entries = {}
            old.cancel()
            number = self._generation.number
        logger.debug("Cache invalidated; generation %d -> %d", old.number, number)
        return number

    def clear(self) -> None:
        """Drop every entry (dev/testing)."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

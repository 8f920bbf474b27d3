"""Filter, sort and page a snapshot of stations.

Pipeline, in order: status filter, min-bikes filter, free-text filter,
projection to `StationView` (occupancy derived here), sort, total count,
page slice. Everything runs over the single list handed in; the caller is
responsible for taking that list from one `get_all()` call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from dublinbikes.models import Station, StationView

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200


@dataclass(frozen=True)
class QueryParams:
    """Immutable query description; hashable so it can key the result cache."""
    status: Optional[str] = None
    min_bikes: Optional[int] = None
    q: Optional[str] = None
    sort: Optional[str] = None
    dir: Optional[str] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def normalized(self) -> "QueryParams":
        """Clamp paging and canonicalize text so equivalent queries share a cache key."""
        return QueryParams(
            status=(self.status or "").strip() or None,
            min_bikes=self.min_bikes,
            q=(self.q or "").strip() or None,
            sort=(self.sort or "").strip().lower() or None,
            dir=(self.dir or "").strip().lower() or None,
            page=max(1, self.page),
            page_size=min(max(1, self.page_size), MAX_PAGE_SIZE),
        )

    @property
    def descending(self) -> bool:
        return (self.dir or "").strip().lower() == "desc"

    def cache_key(self) -> Tuple:
        """Serialized parameter tuple."""
        p = self.normalized()
        return (p.status, p.min_bikes, p.q, p.sort, p.dir, p.page, p.page_size)


@dataclass(frozen=True)
class QueryResult:
    """One page of projected stations plus the filtered total."""
    items: Tuple[StationView, ...] = field(default_factory=tuple)
    total: int = 0


_SORT_KEYS: Dict[str, Callable[[StationView], object]] = {
    "name": lambda v: v.name.casefold(),
    "availablebikes": lambda v: v.available_bikes,
    "available_bikes": lambda v: v.available_bikes,
    "occupancy": lambda v: v.occupancy,
}


def filter_stations(stations: Sequence[Station], params: QueryParams) -> List[Station]:
    """Apply the status, min-bikes and free-text filters, preserving input order."""
    rows = list(stations)
    status = (params.status or "").strip()
    if status:
        wanted = status.casefold()
        rows = [s for s in rows if (s.status or "").casefold() == wanted]
    if params.min_bikes is not None:
        rows = [s for s in rows if s.available_bikes >= params.min_bikes]
    text = (params.q or "").strip()
    if text:
        needle = text.casefold()
        rows = [s for s in rows if needle in (s.name or "").casefold() or needle in (s.address or "").casefold()]
    return rows


def sort_views(views: List[StationView], params: QueryParams) -> List[StationView]:
    """Stable sort; unknown or absent sort keys order by ascending number."""
    key = _SORT_KEYS.get((params.sort or "").strip().lower())
    if key is None:
        return sorted(views, key=lambda v: v.number)
    return sorted(views, key=key, reverse=params.descending)


def run_query(stations: Sequence[Station], params: QueryParams) -> QueryResult:
    """Run the full pipeline over one snapshot."""
    params = params.normalized()
    views = [StationView.from_station(s) for s in filter_stations(stations, params)]
    views = sort_views(views, params)
    start = (params.page - 1) * params.page_size
    return QueryResult(items=tuple(views[start:start + params.page_size]), total=len(views))

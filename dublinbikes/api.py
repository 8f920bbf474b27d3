"""HTTP API for querying and editing stations.

`/api/v1` is served by the snapshot store and `/api/v2` by the document
store; both share the result cache held on `app.state.services`.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response, status
from pydantic import BaseModel

from dublinbikes.errors import DuplicateStationError, StationValidationError
from dublinbikes.models import Station, StationSummary, StationView
from dublinbikes.query_engine import DEFAULT_PAGE_SIZE, QueryParams
from dublinbikes.station_service import StationService
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")

router = APIRouter()


class ApiVersion(str, Enum):
    """Public API versions, one per storage backend."""
    V1 = "v1"
    V2 = "v2"


class StationPage(BaseModel):
    """One page of query results."""
    total: int
    items: list[StationView]


def _service(request: Request, version: ApiVersion) -> StationService:
    return request.app.state.services.for_version(version.value)


@router.get("/ping")
def ping():
    """Liveness probe."""
    return {"status": "alive", "now": datetime.now(timezone.utc).isoformat()}


@router.get("/api/{version}/stations", response_model=StationPage)
def list_stations(
    request: Request,
    version: ApiVersion,
    status_: Optional[str] = Query(default=None, alias="status"),
    min_bikes: Optional[int] = Query(default=None, alias="minBikes"),
    q: Optional[str] = None,
    sort: Optional[str] = None,
    direction: Optional[str] = Query(default=None, alias="dir"),
    page: int = 1,
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="pageSize"),
):
    """Filtered, sorted and paged stations."""
    params = QueryParams(
        status=status_, min_bikes=min_bikes, q=q, sort=sort, dir=direction, page=page, page_size=page_size
    )
    result = _service(request, version).query(params)
    return StationPage(total=result.total, items=list(result.items))


@router.get("/api/{version}/stations/summary", response_model=StationSummary)
def station_summary(request: Request, version: ApiVersion):
    """Fleet-wide totals."""
    return _service(request, version).summary()


@router.get("/api/{version}/stations/{number}", response_model=StationView)
def get_station(request: Request, version: ApiVersion, number: int):
    """Single station by its public number."""
    view = _service(request, version).get_by_number(number)
    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Station not found")
    return view


@router.post("/api/{version}/stations", response_model=Station, status_code=status.HTTP_201_CREATED)
def add_station(request: Request, version: ApiVersion, station: Station, response: Response):
    """Create a station."""
    try:
        stored = _service(request, version).create(station)
    except StationValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except DuplicateStationError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    response.headers["Location"] = f"/api/{version.value}/stations/{stored.number}"
    return stored


@router.put("/api/{version}/stations/{number}", status_code=status.HTTP_204_NO_CONTENT)
def update_station(request: Request, version: ApiVersion, number: int, station: Station):
    """Replace a station; the URL number must match the body."""
    if number != station.number:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL number must match station.number")
    if not _service(request, version).update(station):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Station not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Station records and the shapes derived from them.

`Station` is the stored record; it is immutable so a copied list of stations
is a complete snapshot. Updates produce new instances via `model_copy`.
Records are accepted in the JCDecaux/Dublin Bikes JSON shape: snake_case keys
matched case-insensitively (camelCase is tolerated), and either the pair of
`last_update_utc`/`last_update_local` timestamps or a single `last_update`
epoch in milliseconds.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_validator

DEFAULT_LOCAL_TIMEZONE = "Europe/Dublin"
DEFAULT_STATUS = "OPEN"


def resolve_timezone(tz: ZoneInfo | str | None) -> ZoneInfo:
    """Return a ZoneInfo for a name, an existing zone, or the default."""
    if isinstance(tz, ZoneInfo):
        return tz
    return ZoneInfo(tz or DEFAULT_LOCAL_TIMEZONE)


def now_pair(tz: ZoneInfo | str | None = None, now: datetime | None = None) -> Tuple[datetime, datetime]:
    """Return the same instant as (utc, local)."""
    utc = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return utc, utc.astimezone(resolve_timezone(tz))


class Position(BaseModel):
    """Latitude/longitude pair."""
    model_config = ConfigDict(frozen=True)

    lat: float = 0.0
    lng: float = 0.0


class Station(BaseModel):
    """A bike-share station with capacity and live availability."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    number: int
    contract_name: str = ""
    name: str = ""
    address: str = ""
    position: Optional[Position] = None
    banking: bool = False
    bonus: bool = False
    bike_stands: int = 0
    available_bike_stands: int = 0
    available_bikes: int = 0
    status: str = DEFAULT_STATUS
    last_update_utc: datetime
    last_update_local: datetime

    @model_validator(mode="before")
    @classmethod
    def _normalize_record(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict):
            return data
        data = _canonical_keys(data)

        if data.get("id") in (None, "") and data.get("number") is not None:
            data["id"] = str(data["number"])
        if data.get("status") is None:
            data["status"] = DEFAULT_STATUS

        tz = resolve_timezone((info.context or {}).get("local_tz"))
        raw_epoch = data.pop("last_update", None)
        utc = data.get("last_update_utc")
        local = data.get("last_update_local")
        if utc is None and local is None:
            stamp = None
            if raw_epoch is not None:
                stamp = datetime.fromtimestamp(int(raw_epoch) / 1000, tz=timezone.utc)
            data["last_update_utc"], data["last_update_local"] = now_pair(tz, stamp)
        elif utc is None:
            data["last_update_utc"] = local
        elif local is None:
            data["last_update_local"] = utc
        return data

    def touched(self, tz: ZoneInfo | str | None = None, now: datetime | None = None) -> "Station":
        """Return a copy restamped with the current (or given) instant."""
        utc, local = now_pair(tz, now)
        return self.model_copy(update={"last_update_utc": utc, "last_update_local": local})

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the JSON record shape used by the seed file and document store."""
        return self.model_dump(mode="json")


_FIELD_LOOKUP = {name.replace("_", ""): name for name in Station.model_fields}
_FIELD_LOOKUP["lastupdate"] = "last_update"


def _canonical_keys(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Map record keys onto field names ignoring case and underscores."""
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        canonical = _FIELD_LOOKUP.get(str(key).replace("_", "").lower(), key)
        out[canonical] = value
    return out


class StationView(BaseModel):
    """Query output for one station, with the derived occupancy ratio."""

    id: str
    number: int
    contract_name: str
    name: str
    address: str
    lat: float
    lng: float
    banking: bool
    bonus: bool
    bike_stands: int
    available_bike_stands: int
    available_bikes: int
    status: str
    last_update_utc: datetime
    last_update_local: datetime
    occupancy: float

    @classmethod
    def from_station(cls, station: Station) -> "StationView":
        """Project a station; occupancy is always computed from the raw counts."""
        position = station.position or Position()
        return cls(
            id=station.id,
            number=station.number,
            contract_name=station.contract_name,
            name=station.name,
            address=station.address,
            lat=position.lat,
            lng=position.lng,
            banking=station.banking,
            bonus=station.bonus,
            bike_stands=station.bike_stands,
            available_bike_stands=station.available_bike_stands,
            available_bikes=station.available_bikes,
            status=station.status,
            last_update_utc=station.last_update_utc,
            last_update_local=station.last_update_local,
            occupancy=occupancy(station),
        )


def occupancy(station: Station) -> float:
    """Share of the station's capacity currently holding bikes."""
    if station.bike_stands > 0:
        return station.available_bikes / station.bike_stands
    return 0.0


class StationSummary(BaseModel):
    """Fleet-wide totals."""

    total_stations: int = 0
    total_bike_stands: int = 0
    total_available_bikes: int = 0
    counts_by_status: Dict[str, int] = Field(default_factory=dict)

"""Bulk station data source: a JSON array of station records from disk or HTTP."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List
from zoneinfo import ZoneInfo

import requests
from pydantic import ValidationError

from dublinbikes.errors import SeedDataError
from dublinbikes.models import Station
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="seed")

HTTP_TIMEOUT_SECONDS = 10


def _read_source(source: str | Path) -> Any:
    """Return the decoded JSON document behind a path or URL."""
    text = str(source)
    if text.startswith(("http://", "https://")):
        logger.info("Fetching station seed", extra={"url": mask_url(text)})
        try:
            resp = requests.get(text, timeout=HTTP_TIMEOUT_SECONDS)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as exc:
            raise SeedDataError(f"Failed to fetch station seed from {mask_url(text)}: {exc}") from exc
        except ValueError as exc:
            raise SeedDataError(f"Station seed at {mask_url(text)} is not valid JSON") from exc

    path = Path(text)
    if not path.is_file():
        raise SeedDataError(f"Required data file not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SeedDataError(f"Failed to read station seed {path}: {exc}") from exc


def load_stations(source: str | Path, local_tz: ZoneInfo | str | None = None) -> List[Station]:
    """Load and validate every station record from `source`, preserving order."""
    payload = _read_source(source)
    if not isinstance(payload, list):
        raise SeedDataError(f"Station seed {source} must be a JSON array, got {type(payload).__name__}")

    context = {"local_tz": local_tz}
    stations: List[Station] = []
    for idx, record in enumerate(payload):
        try:
            stations.append(Station.model_validate(record, context=context))
        except ValidationError as exc:
            raise SeedDataError(f"Invalid station record at index {idx} in {source}: {exc}") from exc
    logger.info("Loaded %d stations from seed", len(stations))
    return stations

"""Exceptions raised by the station stores and service."""


class StationError(Exception):
    """Base class for station service errors."""


class StationValidationError(StationError, ValueError):
    """A station was rejected before any write (e.g. negative capacity)."""


class DuplicateStationError(StationError):
    """A station with the same id already exists in the backing store."""


class StationStoreError(StationError):
    """The backing store failed (unreachable, corrupt, misconfigured)."""


class SeedDataError(StationStoreError):
    """The bulk seed source is missing or malformed."""

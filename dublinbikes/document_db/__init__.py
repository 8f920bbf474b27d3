"""Document database clients backing the partitioned station store."""

from .base import (
    DocumentConflictError,
    DocumentContainer,
    DocumentDatabaseClient,
    DocumentDbError,
    DocumentNotFoundError,
)
from .memory import InMemoryDocumentClient
from .redis import RedisDocumentClient

__all__ = [
    "DocumentConflictError",
    "DocumentContainer",
    "DocumentDatabaseClient",
    "DocumentDbError",
    "DocumentNotFoundError",
    "InMemoryDocumentClient",
    "RedisDocumentClient",
]

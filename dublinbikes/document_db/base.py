"""Shared protocol, errors and helpers for document database clients.

The model is a partitioned document database: a client owns databases, a
database owns containers, and every container routes its items by one
partition key path (e.g. "/id"). Item ids are unique within a partition.
Reads keyed by (id, partition key) are point reads; anything filtered on
another field has to visit every partition.
"""

from typing import Any, Dict, List, Protocol

Document = Dict[str, Any]


class DocumentDbError(Exception):
    """Generic document database failure."""


class DocumentNotFoundError(DocumentDbError):
    """The addressed item does not exist."""


class DocumentConflictError(DocumentDbError):
    """An item with the same id already exists in the partition."""


class DocumentContainer(Protocol):
    """A container of JSON documents partitioned by `partition_key_path`."""

    partition_key_path: str

    def read_item(self, item_id: str, partition_key: Any) -> Document:
        """Point read; raises DocumentNotFoundError when absent."""

    def read_partition(self, partition_key: Any) -> List[Document]:
        """Return every document in one partition (single-partition query)."""

    def query_items(self, field: str, value: Any) -> List[Document]:
        """Cross-partition query for documents where `field == value`."""

    def list_items(self) -> List[Document]:
        """Return every document in every partition."""

    def has_items(self) -> bool:
        """Cheap probe: True if at least one document exists."""

    def create_item(self, body: Document) -> Document:
        """Insert; raises DocumentConflictError if the id exists in its partition."""

    def upsert_item(self, body: Document) -> Document:
        """Insert or replace by id within the body's partition."""

    def replace_item(self, item_id: str, body: Document) -> Document:
        """Replace an existing document; raises DocumentNotFoundError when absent."""


class DocumentDatabaseClient(Protocol):
    """Entry point to a document database."""

    def create_database_if_not_exists(self, database_id: str) -> bool:
        """Create the database; return True if it was created."""

    def create_container_if_not_exists(
        self, database_id: str, container_id: str, partition_key_path: str
    ) -> DocumentContainer:
        """Create (or open) a container with the given partition key path."""


def partition_value(body: Document, partition_key_path: str) -> Any:
    """Extract the partition key value from a document."""
    field = partition_key_path.lstrip("/")
    if field not in body or body[field] is None:
        raise DocumentDbError(f"Document is missing partition key '{partition_key_path}'")
    return body[field]


def document_id(body: Document) -> str:
    """Return the document id, which every document must carry."""
    item_id = body.get("id")
    if not item_id:
        raise DocumentDbError("Document is missing 'id'")
    return str(item_id)

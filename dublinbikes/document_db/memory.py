"""In-memory document database, intended for development and tests."""

import json
import threading
from typing import Any, Dict, List

from dublinbikes.document_db.base import (
    Document,
    DocumentConflictError,
    DocumentContainer,
    DocumentDatabaseClient,
    DocumentNotFoundError,
    document_id,
    partition_value,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="document_db/in_memory")


class InMemoryContainer(DocumentContainer):
    """Thread-safe container; documents are stored serialized so callers never share state."""

    def __init__(self, partition_key_path: str) -> None:
        self.partition_key_path = partition_key_path
        self._partitions: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _pk(value: Any) -> str:
        return json.dumps(value)

    def read_item(self, item_id: str, partition_key: Any) -> Document:
        with self._lock:
            raw = self._partitions.get(self._pk(partition_key), {}).get(str(item_id))
        if raw is None:
            raise DocumentNotFoundError(f"Item '{item_id}' not found")
        return json.loads(raw)

    def read_partition(self, partition_key: Any) -> List[Document]:
        with self._lock:
            raws = list(self._partitions.get(self._pk(partition_key), {}).values())
        return [json.loads(raw) for raw in raws]

    def query_items(self, field: str, value: Any) -> List[Document]:
        return [doc for doc in self.list_items() if doc.get(field) == value]

    def list_items(self) -> List[Document]:
        with self._lock:
            raws = [raw for partition in self._partitions.values() for raw in partition.values()]
        return [json.loads(raw) for raw in raws]

    def has_items(self) -> bool:
        with self._lock:
            return any(self._partitions.values())

    def create_item(self, body: Document) -> Document:
        item_id, pk = document_id(body), self._pk(partition_value(body, self.partition_key_path))
        with self._lock:
            partition = self._partitions.setdefault(pk, {})
            if item_id in partition:
                raise DocumentConflictError(f"Item '{item_id}' already exists")
            partition[item_id] = json.dumps(body)
        return body

    def upsert_item(self, body: Document) -> Document:
        item_id, pk = document_id(body), self._pk(partition_value(body, self.partition_key_path))
        with self._lock:
            self._partitions.setdefault(pk, {})[item_id] = json.dumps(body)
        return body

    def replace_item(self, item_id: str, body: Document) -> Document:
        pk = self._pk(partition_value(body, self.partition_key_path))
        with self._lock:
            partition = self._partitions.get(pk)
            if partition is None or str(item_id) not in partition:
                raise DocumentNotFoundError(f"Item '{item_id}' not found")
            partition[str(item_id)] = json.dumps(body)
        return body


class InMemoryDocumentClient(DocumentDatabaseClient):
    """Holds containers per database in process memory."""

    def __init__(self) -> None:
        logger.debug("Initializing InMemoryDocumentClient")
        self._databases: Dict[str, Dict[str, InMemoryContainer]] = {}
        self._lock = threading.Lock()

    def create_database_if_not_exists(self, database_id: str) -> bool:
        with self._lock:
            if database_id in self._databases:
                return False
            self._databases[database_id] = {}
            return True

    def create_container_if_not_exists(
        self, database_id: str, container_id: str, partition_key_path: str
    ) -> InMemoryContainer:
        with self._lock:
            containers = self._databases.setdefault(database_id, {})
            container = containers.get(container_id)
            if container is None:
                container = InMemoryContainer(partition_key_path)
                containers[container_id] = container
            return container

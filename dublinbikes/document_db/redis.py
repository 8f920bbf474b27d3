"""Redis-backed document database.

Layout, for database `db` and container `c`:

- `{prefix}databases`                  set of database ids
- `{prefix}{db}:{c}:meta`              hash holding the partition key path
- `{prefix}{db}:{c}:partitions`        set of partition hash keys
- `{prefix}{db}:{c}:p:{partition}`     hash of document id -> JSON document

One hash per partition keeps point reads to a single HGET while any query on
another field has to read every partition hash. The partitions set makes the
emptiness probe a single SCARD and spares queries a keyspace SCAN.
"""

import json
from typing import Any, List

from redis.exceptions import RedisError

from dublinbikes.document_db.base import (
    Document,
    DocumentConflictError,
    DocumentContainer,
    DocumentDatabaseClient,
    DocumentDbError,
    DocumentNotFoundError,
    document_id,
    partition_value,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="document_db/redis")


def _text(raw) -> str:
    """Decode a Redis reply that may be bytes."""
    return raw.decode("utf-8") if isinstance(raw, bytes) else raw


class RedisContainer(DocumentContainer):
    """One container stored as a family of per-partition hashes."""

    def __init__(self, client, key_base: str, partition_key_path: str) -> None:
        self.client = client
        self.key_base = key_base
        self.partition_key_path = partition_key_path

    def _partition_key(self, value: Any) -> str:
        """Return the Redis key of the hash holding one partition."""
        return f"{self.key_base}:p:{value}"

    @property
    def _index_key(self) -> str:
        return f"{self.key_base}:partitions"

    def _partition_keys(self) -> List[str]:
        """Keys of every partition hash that has held a document."""
        return [_text(key) for key in self.client.smembers(self._index_key)]

    def read_item(self, item_id: str, partition_key: Any) -> Document:
        try:
            raw = self.client.hget(self._partition_key(partition_key), str(item_id))
        except RedisError as exc:
            raise DocumentDbError(f"Failed to read item '{item_id}': {exc}") from exc
        if raw is None:
            raise DocumentNotFoundError(f"Item '{item_id}' not found")
        return json.loads(_text(raw))

    def read_partition(self, partition_key: Any) -> List[Document]:
        try:
            raws = self.client.hvals(self._partition_key(partition_key))
        except RedisError as exc:
            raise DocumentDbError(f"Failed to read partition {partition_key}: {exc}") from exc
        return [json.loads(_text(raw)) for raw in raws]

    def query_items(self, field: str, value: Any) -> List[Document]:
        return [doc for doc in self.list_items() if doc.get(field) == value]

    def list_items(self) -> List[Document]:
        try:
            docs = []
            for key in self._partition_keys():
                docs.extend(json.loads(_text(raw)) for raw in self.client.hvals(key))
            return docs
        except RedisError as exc:
            raise DocumentDbError(f"Failed to list container {self.key_base}: {exc}") from exc

    def has_items(self) -> bool:
        try:
            return self.client.scard(self._index_key) > 0
        except RedisError as exc:
            raise DocumentDbError(f"Failed to probe container {self.key_base}: {exc}") from exc

    def create_item(self, body: Document) -> Document:
        item_id = document_id(body)
        key = self._partition_key(partition_value(body, self.partition_key_path))
        try:
            created = self.client.hsetnx(key, item_id, json.dumps(body))
            if created:
                self.client.sadd(self._index_key, key)
        except RedisError as exc:
            raise DocumentDbError(f"Failed to create item '{item_id}': {exc}") from exc
        if not created:
            raise DocumentConflictError(f"Item '{item_id}' already exists")
        return body

    def upsert_item(self, body: Document) -> Document:
        item_id = document_id(body)
        key = self._partition_key(partition_value(body, self.partition_key_path))
        try:
            self.client.hset(key, item_id, json.dumps(body))
            self.client.sadd(self._index_key, key)
        except RedisError as exc:
            raise DocumentDbError(f"Failed to upsert item '{item_id}': {exc}") from exc
        return body

    def replace_item(self, item_id: str, body: Document) -> Document:
        key = self._partition_key(partition_value(body, self.partition_key_path))
        try:
            if not self.client.hexists(key, str(item_id)):
                raise DocumentNotFoundError(f"Item '{item_id}' not found")
            self.client.hset(key, str(item_id), json.dumps(body))
        except RedisError as exc:
            raise DocumentDbError(f"Failed to replace item '{item_id}': {exc}") from exc
        return body


class RedisDocumentClient(DocumentDatabaseClient):
    """Document database client over a redis-py client."""

    def __init__(self, client, prefix: str = "docdb:") -> None:
        logger.debug("Initializing RedisDocumentClient")
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisDocumentClient":
        """Connect with redis-py and verify the server answers."""
        import redis

        client = redis.Redis.from_url(url)
        try:
            client.ping()
        except RedisError as exc:
            raise DocumentDbError(f"Redis unreachable: {exc}") from exc
        return cls(client, **kwargs)

    def create_database_if_not_exists(self, database_id: str) -> bool:
        try:
            return bool(self.client.sadd(f"{self.prefix}databases", database_id))
        except RedisError as exc:
            raise DocumentDbError(f"Failed to create database '{database_id}': {exc}") from exc

    def create_container_if_not_exists(
        self, database_id: str, container_id: str, partition_key_path: str
    ) -> RedisContainer:
        key_base = f"{self.prefix}{database_id}:{container_id}"
        meta_key = f"{key_base}:meta"
        try:
            self.client.hsetnx(meta_key, "partition_key", partition_key_path)
            stored = _text(self.client.hget(meta_key, "partition_key"))
        except RedisError as exc:
            raise DocumentDbError(f"Failed to create container '{container_id}': {exc}") from exc
        if stored != partition_key_path:
            logger.warning(
                "Container already exists with a different partition key; using the stored one",
                extra={"container": container_id, "requested": partition_key_path, "stored": stored},
            )
        return RedisContainer(self.client, key_base, stored)

"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the station service."""
    model_config = SettingsConfigDict(env_prefix="BIKES_", extra="ignore")

    seed_source: str = "data/dublinbike.json"  # path or http(s) URL
    document_seed_source: str | None = "data/dublinbike.json"
    local_timezone: str = "Europe/Dublin"
    cache_ttl_seconds: float = 300.0
    updater_enabled: bool = True
    updater_interval_ms: int = 12000
    updater_backend: str = "snapshot"  # options: snapshot, document
    document_redis_url: str | None = None
    document_database_id: str = "DublinBikesDb"
    document_container_id: str = "BikeStations"
    document_partition_key: str = "/id"
    log_level: str = "INFO"

    @field_validator("updater_interval_ms", mode="after")
    @classmethod
    def positive_interval(cls, v: int) -> int:
        """Reject intervals that would spin the feed loop."""
        if v <= 0:
            raise ValueError("updater_interval_ms must be > 0")
        return v

    @field_validator("updater_backend", mode="after")
    @classmethod
    def known_backend(cls, v: str) -> str:
        """Normalize and check the backend driven by the feed mutator."""
        v = v.strip().lower()
        if v not in ("snapshot", "document"):
            raise ValueError(f"Unknown updater backend '{v}'")
        return v

    @field_validator("document_partition_key", mode="after")
    @classmethod
    def supported_partition_key(cls, v: str) -> str:
        """Only /id and /number are meaningful partition keys for stations."""
        v = "/" + v.strip().lstrip("/")
        if v not in ("/id", "/number"):
            raise ValueError(f"Unsupported partition key path '{v}'")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")

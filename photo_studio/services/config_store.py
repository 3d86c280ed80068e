"""Key/value configuration store consumed by the site-configuration routes.

Writes go through a single idempotent ``put`` (upsert); ``create`` is only
for callers that need to know the key was new.
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from typing import Any, Dict, Optional, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from photo_studio.config import get_settings
from photo_studio.services.r2_client import get_client

logger = logging.getLogger(__name__)


class ConfigStoreError(RuntimeError):
    pass


class ConfigKeyExistsError(ConfigStoreError):
    def __init__(self, key: str) -> None:
        super().__init__(f"configuration key already exists: {key}")
        self.key = key


@dataclass
class ConfigEntry:
    key: str
    value: Optional[str]
    metadata: Dict[str, Any] = field(default_factory=dict)


class ConfigStore(Protocol):
    def get(self, key: str) -> Optional[ConfigEntry]:
        ...

    def put(self, key: str, value: Optional[str], metadata: Optional[Dict[str, Any]] = None) -> ConfigEntry:
        ...

    def create(self, key: str, value: Optional[str], metadata: Optional[Dict[str, Any]] = None) -> ConfigEntry:
        ...


class InMemoryConfigStore:
    def __init__(self) -> None:
        self._entries: Dict[str, ConfigEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[ConfigEntry]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: Optional[str], metadata: Optional[Dict[str, Any]] = None) -> ConfigEntry:
        entry = ConfigEntry(key=key, value=value, metadata=dict(metadata or {}))
        with self._lock:
            self._entries[key] = entry
        return entry

    def create(self, key: str, value: Optional[str], metadata: Optional[Dict[str, Any]] = None) -> ConfigEntry:
        entry = ConfigEntry(key=key, value=value, metadata=dict(metadata or {}))
        with self._lock:
            if key in self._entries:
                raise ConfigKeyExistsError(key)
            self._entries[key] = entry
        return entry


class R2ConfigStore:
    """Stores each entry as a JSON object under ``<prefix>/<key>.json``."""

    def __init__(self, client, bucket: str, prefix: str = "site-config") -> None:
        self.client = client
        self.bucket = bucket
        self.prefix = prefix.strip("/")

    def _object_key(self, key: str) -> str:
        return f"{self.prefix}/{key}.json"

    def get(self, key: str) -> Optional[ConfigEntry]:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=self._object_key(key))
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in {"NoSuchKey", "404"}:
                return None
            raise ConfigStoreError(f"Failed to read configuration key {key}") from exc
        except BotoCoreError as exc:
            raise ConfigStoreError(f"Failed to read configuration key {key}") from exc

        try:
            payload = json.loads(response["Body"].read())
        except (KeyError, ValueError) as exc:
            raise ConfigStoreError(f"Configuration key {key} holds invalid JSON") from exc
        return ConfigEntry(
            key=key,
            value=payload.get("value"),
            metadata=payload.get("metadata") or {},
        )

    def put(self, key: str, value: Optional[str], metadata: Optional[Dict[str, Any]] = None) -> ConfigEntry:
        entry = ConfigEntry(key=key, value=value, metadata=dict(metadata or {}))
        self._write(entry)
        return entry

    def create(self, key: str, value: Optional[str], metadata: Optional[Dict[str, Any]] = None) -> ConfigEntry:
        entry = ConfigEntry(key=key, value=value, metadata=dict(metadata or {}))
        self._write(entry, only_if_absent=True)
        return entry

    def _write(self, entry: ConfigEntry, *, only_if_absent: bool = False) -> None:
        params: Dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": self._object_key(entry.key),
            "Body": json.dumps(asdict(entry), ensure_ascii=False).encode("utf-8"),
            "ContentType": "application/json",
        }
        if only_if_absent:
            params["IfNoneMatch"] = "*"
        try:
            self.client.put_object(**params)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if only_if_absent and code in {"PreconditionFailed", "412"}:
                raise ConfigKeyExistsError(entry.key) from exc
            raise ConfigStoreError(f"Failed to write configuration key {entry.key}") from exc
        except BotoCoreError as exc:
            raise ConfigStoreError(f"Failed to write configuration key {entry.key}") from exc


@lru_cache(maxsize=1)
def get_config_store() -> ConfigStore:
    """Return the process-wide configuration store."""

    storage = get_settings().storage
    if storage.is_configured:
        return R2ConfigStore(get_client(), storage.bucket, storage.config_prefix)
    logger.warning("R2 storage is not configured; site configuration is kept in memory")
    return InMemoryConfigStore()

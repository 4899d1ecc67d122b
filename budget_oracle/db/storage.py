"""
Key-value storage backends for the insight memory blob.

Every backend exposes the same two calls, ``get(key)`` and ``set(key, value)``,
with string values. Failures are raised as ``StorageError`` so callers never
need to know which backend they are talking to.
"""
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from budget_oracle.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a backend cannot read or write a value."""


class StorageQuotaExceeded(StorageError):
    """Raised when a write would exceed the backend's capacity."""


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    def ping(self) -> bool:
        """Cheap connectivity check used by the status endpoint."""
        return True


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store. ``max_bytes`` caps the size of any single value,
    mimicking a browser storage quota.
    """

    def __init__(self, max_bytes: Optional[int] = None) -> None:
        self._data: Dict[str, str] = {}
        self._max_bytes = max_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._max_bytes is not None and len(value.encode("utf-8")) > self._max_bytes:
            raise StorageQuotaExceeded(f"value for {key!r} exceeds {self._max_bytes} bytes")
        self._data[key] = value


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class JsonFileKeyValueStore(KeyValueStore):
    """One file per key under ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{_UNSAFE_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"failed to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise StorageError(f"failed to write {path}: {e}") from e

    def ping(self) -> bool:
        return self._directory.is_dir() or not self._directory.exists()


def get_key_value_store(config=None) -> KeyValueStore:
    """Build the backend selected by ``STORAGE_BACKEND``."""
    config = config or settings
    backend = config.STORAGE_BACKEND
    if backend == "file":
        return JsonFileKeyValueStore(config.STORAGE_DIR)
    if backend == "dynamo":
        from budget_oracle.db.dynamo import DynamoKeyValueStore

        return DynamoKeyValueStore(config.DYNAMO_MEMORY_TABLE, region_name=config.DYNAMO_REGION)
    if backend != "memory":
        logger.warning(f"Unknown storage backend {backend!r}, falling back to memory")
    return InMemoryKeyValueStore()

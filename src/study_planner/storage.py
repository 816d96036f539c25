from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, List, Optional

from .errors import StorageUnavailable
from .settings import Settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class KeyValueStorage(ABC):
    """
    Keyed persistent storage of JSON-ready lists, the medium behind the local
    fallback cache. Keys are enumerable so records can be located by id
    without knowing their owner.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[List[Dict[str, Any]]]:
        """Return the list stored under key, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: List[Dict[str, Any]]) -> None:
        """Replace the list stored under key."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Drop key; missing keys are ignored."""

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """Return every stored key starting with prefix, sorted."""


class MemoryStorage(KeyValueStorage):
    """
    Thread-safe in-memory storage suitable for testing and default runtime.
    Values are deep-copied in and out so callers never share state with it.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._data: Dict[str, List[Dict[str, Any]]] = {}

    def get(self, key: str) -> Optional[List[Dict[str, Any]]]:
        with self._lock:
            value = self._data.get(key)
            return None if value is None else copy.deepcopy(value)

    def set(self, key: str, value: List[Dict[str, Any]]) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))


class UnavailableStorage(KeyValueStorage):
    """Storage for contexts where nothing can be persisted locally."""

    def get(self, key: str) -> Optional[List[Dict[str, Any]]]:
        raise StorageUnavailable("Local storage is not available")

    def set(self, key: str, value: List[Dict[str, Any]]) -> None:
        raise StorageUnavailable("Local storage is not available")

    def remove(self, key: str) -> None:
        raise StorageUnavailable("Local storage is not available")

    def keys(self, prefix: str = "") -> List[str]:
        raise StorageUnavailable("Local storage is not available")


# PUBLIC_INTERFACE
def get_storage(settings: Settings) -> KeyValueStorage:
    """
    Factory to return the configured local storage.
    - memory: MemoryStorage
    - sqlite: SQLiteStorage at settings.sqlite_db_path
    """
    if settings.cache_backend == "sqlite":
        from .db import SQLiteStorage

        logger.info("Local cache backed by sqlite path=%s", settings.sqlite_db_path)
        return SQLiteStorage(settings.sqlite_db_path)
    return MemoryStorage()

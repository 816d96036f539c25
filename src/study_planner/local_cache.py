from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .models import to_entity, to_row
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

TODOS_PREFIX = "local_todos_"
FOLDERS_PREFIX = "local_folders_"


class LocalFallbackCache:
    """
    Owner-partitioned list of records kept in a KeyValueStorage under
    ``prefix + owner_id``. Records are stored JSON-ready and parsed back into
    entities tagged with origin 'local'.

    Every storage error propagates as StorageUnavailable.
    """

    def __init__(self, storage: KeyValueStorage, prefix: str) -> None:
        self._storage = storage
        self._prefix = prefix

    def key_for(self, owner_id: str) -> str:
        return f"{self._prefix}{owner_id}"

    def load(self, owner_id: str) -> List[Dict[str, Any]]:
        rows = self._storage.get(self.key_for(owner_id)) or []
        return [to_entity(r, "local") for r in rows if isinstance(r, dict)]

    def save(self, owner_id: str, records: List[Dict[str, Any]]) -> None:
        self._storage.set(self.key_for(owner_id), [to_row(r) for r in records])

    def clear(self, owner_id: str) -> None:
        self._storage.remove(self.key_for(owner_id))

    def prepend(self, owner_id: str, record: Dict[str, Any]) -> None:
        records = self.load(owner_id)
        records.insert(0, record)
        self.save(owner_id, records)
        logger.info("Stored record locally key=%s id=%s", self.key_for(owner_id), record.get("id"))

    def owners(self) -> List[str]:
        return [k[len(self._prefix):] for k in self._storage.keys(self._prefix)]

    def locate(self, owner_id: str, record_id: str) -> Optional[Tuple[List[Dict[str, Any]], int]]:
        """
        Find record_id in owner_id's bucket only.
        Returns (that owner's records, index) or None.
        """
        records = self.load(owner_id)
        for index, record in enumerate(records):
            if record.get("id") == record_id:
                return records, index
        return None

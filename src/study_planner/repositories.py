from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional

from .errors import NotFound, RemoteFailure, StorageUnavailable
from .local_cache import FOLDERS_PREFIX, TODOS_PREFIX, LocalFallbackCache
from .models import FOLDERS_TABLE, TODOS_TABLE, to_entity, to_row, utcnow
from .record_store import RecordStore, get_record_store
from .settings import get_settings
from .storage import KeyValueStorage, get_storage

logger = logging.getLogger(__name__)

LOCAL_ID_PREFIX = "local-"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def new_local_id() -> str:
    """Id for a record that only exists in the local cache: creation millis plus a random suffix."""
    return f"{LOCAL_ID_PREFIX}{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def is_local_id(record_id: str) -> bool:
    return record_id.startswith(LOCAL_ID_PREFIX)


def _stamp(record: Dict[str, Any]) -> datetime:
    value = record.get("updated_at")
    if not isinstance(value, datetime):
        return _EPOCH
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# PUBLIC_INTERFACE
def merge_local_first(
    local: List[Dict[str, Any]], remote: List[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """
    Merge cached and remote records for one owner.

    Local entries come first, then remote entries, each in their own order.
    Records are never de-duplicated by content. When two entries share an id
    the one with the later updated_at wins and keeps the earlier position.
    """
    merged: List[Dict[str, Any]] = []
    slots: Dict[Any, int] = {}
    for record in [*local, *remote]:
        record_id = record.get("id")
        slot = slots.get(record_id)
        if slot is None:
            slots[record_id] = len(merged)
            merged.append(record)
        elif _stamp(record) > _stamp(merged[slot]):
            merged[slot] = record
    return merged


class FallbackRepository:
    """
    CRUD facade over a remote RecordStore with a LocalFallbackCache used only
    when the remote call fails. Records created in the cache get 'local-' ids;
    those ids never exist remotely, so writes to them go straight to the cache.
    Writes only ever touch records whose user_id is the calling owner.
    """

    label = "Record"

    def __init__(
        self,
        store: RecordStore,
        cache: LocalFallbackCache,
        table: str,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self.table = table
        self._defaults = dict(defaults or {})

    def list(self, owner_id: str) -> List[Dict[str, Any]]:
        """
        Remote rows for owner_id (newest first) preceded by the owner's cached
        rows. When the remote read fails only the cached rows are returned.
        """
        try:
            rows = self._store.select(self.table, {"user_id": owner_id})
        except RemoteFailure as e:
            logger.warning("Remote read of %s failed, serving local cache: %s", self.table, e.message)
            try:
                return self._cache.load(owner_id)
            except StorageUnavailable:
                raise e
        remote = [to_entity(r, "remote") for r in rows]
        try:
            local = self._cache.load(owner_id)
        except StorageUnavailable as e:
            logger.warning("Local cache unavailable, listing remote %s only: %s", self.table, e.message)
            local = []
        return merge_local_first(local, remote)

    def create(self, owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        record = {**self._defaults, **data, "user_id": owner_id}
        try:
            return to_entity(self._store.insert(self.table, to_row(record)), "remote")
        except RemoteFailure as e:
            logger.warning("Remote insert into %s failed, storing locally: %s", self.table, e.message)
            failure = e

        now = utcnow()
        entity = {**record, "id": new_local_id(), "created_at": now, "updated_at": now, "origin": "local"}
        try:
            self._cache.prepend(owner_id, entity)
        except StorageUnavailable as e:
            raise failure from e
        return entity

    def update(self, owner_id: str, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply changes to one of owner_id's records. Explicit None values are
        written through. Raises NotFound when owner_id has no such record in
        either store.
        """
        failure: Optional[RemoteFailure] = None
        if not is_local_id(record_id):
            try:
                row = self._store.update(self.table, record_id, to_row(changes), {"user_id": owner_id})
                return to_entity(row, "remote")
            except RemoteFailure as e:
                logger.warning("Remote update of %s id=%s failed: %s", self.table, record_id, e.message)
                failure = e

        try:
            found = self._cache.locate(owner_id, record_id)
            if found is None:
                raise NotFound(f"{self.label} not found")
            records, index = found
            updated = {**records[index], **changes, "updated_at": utcnow(), "origin": "local"}
            records[index] = updated
            self._cache.save(owner_id, records)
        except StorageUnavailable as e:
            if failure is None:
                raise
            raise failure from e
        logger.info("Updated local %s id=%s", self.table, record_id)
        return updated

    def delete(self, owner_id: str, record_id: str) -> None:
        """Delete one of owner_id's records; any other id is a no-op."""
        failure: Optional[RemoteFailure] = None
        if not is_local_id(record_id):
            try:
                self._store.delete(self.table, record_id, {"user_id": owner_id})
                return
            except RemoteFailure as e:
                logger.warning("Remote delete of %s id=%s failed: %s", self.table, record_id, e.message)
                failure = e

        try:
            found = self._cache.locate(owner_id, record_id)
            if found is None:
                logger.debug("Nothing to delete for %s id=%s", self.table, record_id)
                return
            records, index = found
            del records[index]
            self._cache.save(owner_id, records)
        except StorageUnavailable as e:
            if failure is None:
                raise
            raise failure from e
        logger.info("Deleted local %s id=%s", self.table, record_id)

    def owns(self, owner_id: str, record_id: str) -> bool:
        """True when record_id is among the records owner_id can currently see."""
        return any(r.get("id") == record_id for r in self.list(owner_id))


class TodoRepository(FallbackRepository):
    label = "Todo"

    def __init__(self, store: RecordStore, cache: LocalFallbackCache) -> None:
        super().__init__(store, cache, TODOS_TABLE, defaults={"completed": False})

    def toggle(self, owner_id: str, record_id: str, completed: bool) -> Dict[str, Any]:
        return self.update(owner_id, record_id, {"completed": completed})

    def detach_folder(self, owner_id: str, folder_id: str) -> int:
        """Clear folder_id on every todo of owner_id that points at folder_id."""
        cleared = 0
        for todo in self.list(owner_id):
            if todo.get("folder_id") == folder_id:
                self.update(owner_id, todo["id"], {"folder_id": None})
                cleared += 1
        return cleared


class FolderRepository(FallbackRepository):
    label = "Folder"

    def __init__(self, store: RecordStore, cache: LocalFallbackCache) -> None:
        super().__init__(store, cache, FOLDERS_TABLE)


@dataclass(frozen=True)
class Repositories:
    todos: TodoRepository
    folders: FolderRepository


# PUBLIC_INTERFACE
def build_repositories(store: RecordStore, storage: KeyValueStorage) -> Repositories:
    """Wire the todo and folder repositories over one remote store and one local storage."""
    return Repositories(
        todos=TodoRepository(store, LocalFallbackCache(storage, TODOS_PREFIX)),
        folders=FolderRepository(store, LocalFallbackCache(storage, FOLDERS_PREFIX)),
    )


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repositories() -> Repositories:
    """
    Process-wide repositories built from settings.
    Call get_repositories.cache_clear() after changing the environment.
    """
    settings = get_settings()
    logger.info(
        "Repositories ready remote=%s cache=%s", settings.remote_backend, settings.cache_backend
    )
    return build_repositories(get_record_store(settings), get_storage(settings))

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, List, Optional

import requests

from .errors import RemoteFailure
from .models import utcnow
from .settings import Settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class RecordStore(ABC):
    """
    Contract of the hosted table store. Rows are plain dicts; every failure is
    raised as RemoteFailure.
    """

    @abstractmethod
    def select(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Return rows whose columns equal every filter value, newest created_at first."""

    @abstractmethod
    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert record and return the stored row."""

    @abstractmethod
    def update(
        self, table: str, record_id: str, partial: Dict[str, Any], filters: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Apply partial to the row with record_id and return it. Rows that are
        missing or do not equal every extra filter value fail.
        """

    @abstractmethod
    def delete(self, table: str, record_id: str, filters: Optional[Dict[str, Any]] = None) -> None:
        """Delete the row with record_id if it equals every extra filter value."""


class PostgrestRecordStore(RecordStore):
    """
    Client for a PostgREST (Supabase) REST endpoint at ``{base_url}/rest/v1``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token or api_key
        self._timeout = timeout
        self._session = session or requests.Session()

    def _url(self, table: str) -> str:
        return f"{self._base_url}/rest/v1/{table}"

    def _headers(self, write: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        if write:
            headers["Content-Type"] = "application/json"
            headers["Prefer"] = "return=representation"
        return headers

    @staticmethod
    def _extract_error(response: requests.Response) -> str:
        try:
            body = response.json()
            if isinstance(body, dict):
                msg = body.get("message") or body.get("error_description") or body.get("error")
                if msg:
                    return f"HTTP {response.status_code}: {msg}"
        except ValueError:
            pass
        text = (response.text or "").strip()
        if text:
            return f"HTTP {response.status_code}: {text[:300]}"
        return f"HTTP {response.status_code}: request failed"

    def _request(
        self,
        method: str,
        table: str,
        params: Dict[str, str],
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        logger.debug("%s %s params=%s", method, table, params)
        try:
            response = self._session.request(
                method,
                self._url(table),
                params=params,
                json=json_body,
                headers=self._headers(write=method != "GET"),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise RemoteFailure(f"{method} {table} failed: {e}") from e
        if response.status_code >= 300:
            raise RemoteFailure(self._extract_error(response))
        if response.status_code == 204 or not (response.text or "").strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteFailure(f"Unexpected response format from {table}") from e

    @staticmethod
    def _single(body: Any, table: str) -> Dict[str, Any]:
        if isinstance(body, list):
            if not body:
                raise RemoteFailure(f"No {table} row matched")
            body = body[0]
        if not isinstance(body, dict):
            raise RemoteFailure(f"Unexpected response format from {table}")
        return body

    @staticmethod
    def _match(record_id: str, filters: Optional[Dict[str, Any]]) -> Dict[str, str]:
        params = {"id": f"eq.{record_id}"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        return params

    def select(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        params = {"select": "*", "order": "created_at.desc"}
        for column, value in filters.items():
            params[column] = f"eq.{value}"
        body = self._request("GET", table, params)
        if body is None:
            return []
        if not isinstance(body, list):
            raise RemoteFailure(f"Unexpected response format from {table}")
        return body

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        return self._single(self._request("POST", table, {}, record), table)

    def update(
        self, table: str, record_id: str, partial: Dict[str, Any], filters: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        body = self._request("PATCH", table, self._match(record_id, filters), partial)
        return self._single(body, table)

    def delete(self, table: str, record_id: str, filters: Optional[Dict[str, Any]] = None) -> None:
        self._request("DELETE", table, self._match(record_id, filters))


class InMemoryRecordStore(RecordStore):
    """
    Thread-safe in-process table store assigning uuid ids and timestamps the
    way the hosted store does.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        return self._tables.setdefault(table, {})

    def select(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [
                r.copy()
                for r in self._table(table).values()
                if all(r.get(k) == v for k, v in filters.items())
            ]
        # Later inserts win ties on created_at
        return sorted(reversed(rows), key=lambda r: r["created_at"], reverse=True)

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        now = utcnow()
        row = dict(record)
        row.setdefault("id", str(uuid.uuid4()))
        row["created_at"] = now
        row["updated_at"] = now
        with self._lock:
            self._table(table)[row["id"]] = row
            return row.copy()

    def update(
        self, table: str, record_id: str, partial: Dict[str, Any], filters: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        with self._lock:
            existing = self._matching(table, record_id, filters)
            if existing is None:
                raise RemoteFailure(f"No {table} row matched")
            updated = {**existing, **partial, "updated_at": utcnow()}
            self._table(table)[record_id] = updated
            return updated.copy()

    def delete(self, table: str, record_id: str, filters: Optional[Dict[str, Any]] = None) -> None:
        with self._lock:
            if self._matching(table, record_id, filters) is not None:
                del self._table(table)[record_id]

    def _matching(
        self, table: str, record_id: str, filters: Optional[Dict[str, Any]]
    ) -> Optional[Dict[str, Any]]:
        row = self._table(table).get(record_id)
        if row is None or not all(row.get(k) == v for k, v in (filters or {}).items()):
            return None
        return row


class OfflineRecordStore(RecordStore):
    """A store that is never reachable; every operation fails."""

    @staticmethod
    def _error(table: str) -> RemoteFailure:
        return RemoteFailure(f"Remote store is offline ({table})")

    def select(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        raise self._error(table)

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        raise self._error(table)

    def update(
        self, table: str, record_id: str, partial: Dict[str, Any], filters: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        raise self._error(table)

    def delete(self, table: str, record_id: str, filters: Optional[Dict[str, Any]] = None) -> None:
        raise self._error(table)


# PUBLIC_INTERFACE
def get_record_store(settings: Settings) -> RecordStore:
    """
    Factory to return the configured remote store.
    - memory: InMemoryRecordStore
    - postgrest: PostgrestRecordStore at settings.remote_url
    - offline: OfflineRecordStore (local-only operation)
    """
    if settings.remote_backend == "postgrest" and settings.remote_url:
        return PostgrestRecordStore(
            settings.remote_url,
            api_key=settings.remote_api_key,
            access_token=settings.remote_access_token,
            timeout=settings.remote_timeout,
        )
    if settings.remote_backend == "offline":
        return OfflineRecordStore()
    return InMemoryRecordStore()

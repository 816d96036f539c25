from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Literal, Optional, TypedDict

Origin = Literal["remote", "local"]

TODOS_TABLE = "todos"
FOLDERS_TABLE = "folders"

NEUTRAL_COLOR = "#9CA3AF"
DEFAULT_FOLDER_COLOR = "#FF6B6B"
PRESET_COLORS = [
    "#FF6B6B",  # Red
    "#4ECDC4",  # Teal
    "#45B7D1",  # Blue
    "#FFA07A",  # Light Salmon
    "#98D8C8",  # Mint
    "#F7DC6F",  # Yellow
    "#BB8FCE",  # Purple
    "#85C1E2",  # Sky Blue
    "#F8B88B",  # Peach
    "#76D7C4",  # Turquoise
]


# PUBLIC_INTERFACE
class TodoEntity(TypedDict, total=False):
    """
    A Todo record as exchanged with the record store and the local cache.

    Fields:
    - id: Unique string identifier (server uuid or 'local-...' for cache-only records)
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag
    - due_date: Optional due datetime; date-only input is promoted to midnight
    - folder_id: Optional soft reference to a Folder of the same owner
    - user_id: Owner id
    - created_at / updated_at: timestamps
    - origin: 'remote' or 'local', set when the record is read back
    """

    id: str
    title: str
    description: Optional[str]
    completed: bool
    due_date: Optional[datetime]
    folder_id: Optional[str]
    user_id: str
    created_at: datetime
    updated_at: datetime
    origin: Origin


# PUBLIC_INTERFACE
class FolderEntity(TypedDict, total=False):
    """A color-coded category owned by one owner."""

    id: str
    name: str
    color: str
    user_id: str
    created_at: datetime
    updated_at: datetime
    origin: Origin


TIMESTAMP_FIELDS = ("due_date", "created_at", "updated_at")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp coming from JSON (ISO8601 string) or already a datetime.
    Date-only values become midnight. A trailing 'Z' is accepted.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    s = str(value).strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        d = date.fromisoformat(s)
        return datetime(d.year, d.month, d.day)


def to_entity(row: Dict[str, Any], origin: Origin) -> Dict[str, Any]:
    """Copy a raw row, parse its timestamp fields and tag it with its origin."""
    entity = dict(row)
    for field in TIMESTAMP_FIELDS:
        if field in entity:
            entity[field] = parse_timestamp(entity[field])
    entity["origin"] = origin
    return entity


def to_row(entity: Dict[str, Any]) -> Dict[str, Any]:
    """JSON-ready copy of an entity; drops the read-side origin tag."""
    row = {k: v for k, v in entity.items() if k != "origin"}
    for field in TIMESTAMP_FIELDS:
        value = row.get(field)
        if isinstance(value, (datetime, date)):
            row[field] = value.isoformat()
    return row

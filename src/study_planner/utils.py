from __future__ import annotations

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Return the named IANA timezone, or UTC when the name is empty or unknown."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using UTC", name)
        return timezone.utc


# PUBLIC_INTERFACE
def local_moment(value: datetime, tz: tzinfo) -> datetime:
    """
    Express a timestamp in the planner timezone. Naive values are taken to
    already be wall-clock time there.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


# PUBLIC_INTERFACE
def local_date(value: datetime, tz: tzinfo) -> date:
    """Calendar day a timestamp falls on; time of day is ignored."""
    return local_moment(value, tz).date()


# PUBLIC_INTERFACE
def tint(color: str, alpha: str) -> str:
    """Lighter variant of a hex color made by appending a two-digit alpha suffix."""
    return f"{color}{alpha}"


# PUBLIC_INTERFACE
def completion_counts(items: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """
    Count pending and completed todos.

    Returns:
        Dict with keys: pending, completed.
    """
    pending = 0
    completed = 0
    for item in items:
        if item.get("completed"):
            completed += 1
        else:
            pending += 1
    return {"pending": pending, "completed": completed}

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth import get_owner_id
from ..calendar_view import CalendarGrid, CalendarViewMode, NavigationAction, project_calendar, shift_reference
from ..repositories import Repositories, get_repositories
from ..schemas import StatsOut
from ..settings import get_settings
from ..timeline_view import Timeline, project_timeline
from ..utils import completion_counts, resolve_timezone

router = APIRouter(
    prefix="/api/v1/views",
    tags=["views"],
)


# PUBLIC_INTERFACE
@router.get(
    "/calendar",
    response_model=CalendarGrid,
    summary="Calendar Grid",
    description=(
        "Week (7 days, Monday first) or month (42 days, Sunday first) grid of the owner's "
        "dated todos, at most 3 per day plus a '+N more' summary.\n\n"
        "Query parameters:\n"
        "- view: week or month\n"
        "- date: reference date (defaults to today)\n"
        "- action: previous, next or today, applied to the reference date before projecting\n\n"
        "The resolved reference date is returned so clients can navigate from it."
    ),
)
def calendar_grid(
    view: CalendarViewMode = Query("week", description="week or month"),
    reference: Optional[date] = Query(None, alias="date", description="Reference date (YYYY-MM-DD)"),
    action: Optional[NavigationAction] = Query(None, description="previous, next or today"),
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> CalendarGrid:
    tz = resolve_timezone(get_settings().timezone)
    today = datetime.now(tz).date()
    ref = reference or today
    if action is not None:
        ref = shift_reference(ref, view, action, today=today)
    return project_calendar(
        repos.todos.list(owner_id),
        repos.folders.list(owner_id),
        ref,
        view,
        today=today,
        tz=tz,
    )


# PUBLIC_INTERFACE
@router.get(
    "/timeline",
    response_model=Optional[Timeline],
    summary="Timeline",
    description="Dated todos positioned on a 0-100 scale and grouped by day and folder; null when nothing is dated.",
)
def timeline(
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> Optional[Timeline]:
    tz = resolve_timezone(get_settings().timezone)
    return project_timeline(repos.todos.list(owner_id), repos.folders.list(owner_id), tz=tz)


# PUBLIC_INTERFACE
@router.get("/stats", response_model=StatsOut, summary="Todo Counters")
def stats(
    owner_id: str = Depends(get_owner_id),
    repos: Repositories = Depends(get_repositories),
) -> StatsOut:
    items = repos.todos.list(owner_id)
    counts = completion_counts(items)
    return StatsOut(
        total=len(items),
        dated=sum(1 for t in items if t.get("due_date") is not None),
        **counts,
    )

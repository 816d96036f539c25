"""
Calendar projection: a week (7 cells) or month (42 cells) grid of days, each
holding the todos due that day.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Literal, Optional, Union

from .models import NEUTRAL_COLOR
from .utils import local_date, tint

CalendarViewMode = Literal["week", "month"]
NavigationAction = Literal["previous", "next", "today"]

MAX_TASKS_PER_DAY = 3
MONTH_GRID_DAYS = 42
CELL_ALPHA = "30"
LEGEND_ALPHA = "15"
NEUTRAL_CELL_BACKGROUND = "#E5E7EB30"

WEEK_HEADERS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_HEADERS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass(frozen=True)
class CalendarTask:
    id: str
    title: str
    completed: bool
    due_date: datetime
    folder_id: Optional[str]
    folder_name: Optional[str]
    background: str
    border: str


@dataclass(frozen=True)
class CalendarDay:
    day: date
    is_today: bool
    in_current_month: bool
    tasks: List[CalendarTask]
    total: int
    overflow: int
    more_label: Optional[str]


@dataclass(frozen=True)
class LegendEntry:
    folder_id: str
    name: str
    color: str
    background: str


@dataclass(frozen=True)
class CalendarGrid:
    view: CalendarViewMode
    reference: date
    start: date
    end: date
    label: str
    weekdays: List[str]
    days: List[CalendarDay]
    legend: List[LegendEntry]


def week_start(day: date) -> date:
    """Monday on or before day."""
    return day - timedelta(days=day.weekday())


def month_grid_start(day: date) -> date:
    """Sunday on or before the first of day's month."""
    first = day.replace(day=1)
    return first - timedelta(days=(first.weekday() + 1) % 7)


def add_months(day: date, months: int) -> date:
    """Calendar month arithmetic; the day of month is clamped to the target month's length."""
    years, month_index = divmod(day.month - 1 + months, 12)
    year = day.year + years
    month = month_index + 1
    return day.replace(year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1]))


def visible_days(reference: date, view: CalendarViewMode) -> List[date]:
    if view == "week":
        start, count = week_start(reference), 7
    elif view == "month":
        start, count = month_grid_start(reference), MONTH_GRID_DAYS
    else:
        raise ValueError(f"Unknown calendar view: {view!r}")
    return [start + timedelta(days=i) for i in range(count)]


def _as_date(value: Union[date, datetime], tz: tzinfo) -> date:
    if isinstance(value, datetime):
        return local_date(value, tz)
    return value


def _range_label(view: CalendarViewMode, reference: date, start: date, end: date) -> str:
    if view == "week":
        return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"
    return f"{reference:%B} {reference.year}"


def _task_cell(todo: Dict[str, Any], folder: Optional[Dict[str, Any]]) -> CalendarTask:
    return CalendarTask(
        id=todo["id"],
        title=todo["title"],
        completed=bool(todo.get("completed")),
        due_date=todo["due_date"],
        folder_id=todo.get("folder_id"),
        folder_name=folder["name"] if folder else None,
        background=tint(folder["color"], CELL_ALPHA) if folder else NEUTRAL_CELL_BACKGROUND,
        border=folder["color"] if folder else NEUTRAL_COLOR,
    )


# PUBLIC_INTERFACE
def project_calendar(
    todos: Iterable[Dict[str, Any]],
    folders: Iterable[Dict[str, Any]],
    reference: Union[date, datetime],
    view: CalendarViewMode,
    *,
    today: Optional[date] = None,
    tz: tzinfo = timezone.utc,
) -> CalendarGrid:
    """
    Build the calendar grid around reference.

    Week view spans the Monday-based week containing reference. Month view
    starts on the Sunday on/before the first of the month and always has 42
    cells. A cell shows at most MAX_TASKS_PER_DAY todos in their input order;
    the rest are summarized by overflow / more_label. Todos without a due
    date, or due outside the grid, are left out.
    """
    ref = _as_date(reference, tz)
    today = today or datetime.now(tz).date()
    folder_map = {f["id"]: f for f in folders}

    days = visible_days(ref, view)
    buckets: Dict[date, List[Dict[str, Any]]] = {d: [] for d in days}
    for todo in todos:
        due = todo.get("due_date")
        if not isinstance(due, datetime):
            continue
        bucket = buckets.get(local_date(due, tz))
        if bucket is not None:
            bucket.append(todo)

    cells: List[CalendarDay] = []
    for day in days:
        due_today = buckets[day]
        shown = [_task_cell(t, folder_map.get(t.get("folder_id"))) for t in due_today[:MAX_TASKS_PER_DAY]]
        overflow = max(len(due_today) - MAX_TASKS_PER_DAY, 0)
        cells.append(
            CalendarDay(
                day=day,
                is_today=day == today,
                in_current_month=view == "week" or day.month == ref.month,
                tasks=shown,
                total=len(due_today),
                overflow=overflow,
                more_label=f"+{overflow} more" if overflow else None,
            )
        )

    legend = [
        LegendEntry(folder_id=f["id"], name=f["name"], color=f["color"], background=tint(f["color"], LEGEND_ALPHA))
        for f in folder_map.values()
    ]
    return CalendarGrid(
        view=view,
        reference=ref,
        start=days[0],
        end=days[-1],
        label=_range_label(view, ref, days[0], days[-1]),
        weekdays=list(WEEK_HEADERS if view == "week" else MONTH_HEADERS),
        days=cells,
        legend=legend,
    )


# PUBLIC_INTERFACE
def shift_reference(
    reference: date,
    view: CalendarViewMode,
    action: NavigationAction,
    *,
    today: Optional[date] = None,
) -> date:
    """
    Move the calendar: previous/next step 7 days in week view and one month
    in month view; today jumps back to the current date.
    """
    if action == "today":
        return today or date.today()
    if action not in ("previous", "next"):
        raise ValueError(f"Unknown navigation action: {action!r}")
    step = -1 if action == "previous" else 1
    if view == "week":
        return reference + timedelta(days=7 * step)
    return add_months(reference, step)

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Literal, Optional

from .models import NEUTRAL_COLOR
from .utils import local_moment

DayStatus = Literal["today", "past", "future"]

NO_FOLDER = "no-folder"
NO_FOLDER_LABEL = "Free Time / No Category"


@dataclass(frozen=True)
class TimelineMarker:
    id: str
    title: str
    completed: bool
    due_date: datetime
    position: float


@dataclass(frozen=True)
class TimelineTask:
    id: str
    title: str
    completed: bool
    due_date: datetime
    time_label: str


@dataclass(frozen=True)
class FolderGroup:
    folder_id: str
    name: str
    color: str
    tasks: List[TimelineTask]


@dataclass(frozen=True)
class TimelineDay:
    day: date
    status: DayStatus
    pending: int
    completed: int
    groups: List[FolderGroup]


@dataclass(frozen=True)
class Timeline:
    earliest: datetime
    latest: datetime
    now_position: Optional[float]
    markers: List[TimelineMarker]
    days: List[TimelineDay]


def timeline_position(moment: datetime, earliest: datetime, latest: datetime) -> float:
    """
    Place moment on a 0..100 scale between earliest and latest, clamped.
    A zero-length span puts everything in the middle.
    """
    span = (latest - earliest).total_seconds()
    if span == 0:
        return 50.0
    position = (moment - earliest).total_seconds() / span * 100
    return max(0.0, min(100.0, position))


def day_status(day: date, today: date) -> DayStatus:
    if day == today:
        return "today"
    return "past" if day < today else "future"


# PUBLIC_INTERFACE
def project_timeline(
    todos: Iterable[Dict[str, Any]],
    folders: Iterable[Dict[str, Any]],
    *,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> Optional[Timeline]:
    """
    Project dated todos onto a timeline.

    Returns None when no todo has a due date. Otherwise todos are sorted by
    due date, given a 0..100 position between the earliest and latest due
    date, and grouped by calendar day and then by folder (first-seen order,
    undated folders under NO_FOLDER). now_position is set only when now lies
    inside [earliest, latest].
    """
    dated = [
        (local_moment(t["due_date"], tz), t)
        for t in todos
        if isinstance(t.get("due_date"), datetime)
    ]
    if not dated:
        return None
    dated.sort(key=lambda pair: pair[0])

    current = local_moment(now, tz) if now else datetime.now(tz)
    today = current.date()
    earliest = dated[0][0]
    latest = dated[-1][0]
    folder_map = {f["id"]: f for f in folders}

    markers = [
        TimelineMarker(
            id=t["id"],
            title=t["title"],
            completed=bool(t.get("completed")),
            due_date=due,
            position=timeline_position(due, earliest, latest),
        )
        for due, t in dated
    ]

    by_day: Dict[date, Dict[str, List[TimelineTask]]] = {}
    for due, t in dated:
        groups = by_day.setdefault(due.date(), {})
        groups.setdefault(t.get("folder_id") or NO_FOLDER, []).append(
            TimelineTask(
                id=t["id"],
                title=t["title"],
                completed=bool(t.get("completed")),
                due_date=due,
                time_label=f"{due:%H:%M}",
            )
        )

    days: List[TimelineDay] = []
    for day in sorted(by_day):
        groups = []
        for folder_id, tasks in by_day[day].items():
            folder = folder_map.get(folder_id) if folder_id != NO_FOLDER else None
            groups.append(
                FolderGroup(
                    folder_id=folder_id,
                    name=folder["name"] if folder else NO_FOLDER_LABEL,
                    color=folder["color"] if folder else NEUTRAL_COLOR,
                    tasks=tasks,
                )
            )
        done = sum(1 for g in groups for task in g.tasks if task.completed)
        total = sum(len(g.tasks) for g in groups)
        days.append(
            TimelineDay(
                day=day,
                status=day_status(day, today),
                pending=total - done,
                completed=done,
                groups=groups,
            )
        )

    in_range = earliest <= current <= latest
    return Timeline(
        earliest=earliest,
        latest=latest,
        now_position=timeline_position(current, earliest, latest) if in_range else None,
        markers=markers,
        days=days,
    )

from __future__ import annotations

from datetime import date, datetime, timezone

from study_planner.timeline_view import NO_FOLDER, NO_FOLDER_LABEL, project_timeline, timeline_position

UTC = timezone.utc
FOLDERS = [
    {"id": "math", "name": "Mathematics", "color": "#4ECDC4"},
    {"id": "art", "name": "Art", "color": "#BB8FCE"},
]


def todo(todo_id, due, folder_id=None, completed=False):
    return {"id": todo_id, "title": f"Task {todo_id}", "due_date": due, "folder_id": folder_id, "completed": completed}


def positions(timeline):
    return {m.id: m.position for m in timeline.markers}


class TestPositions:
    def test_linear_positions(self):
        todos = [
            todo("mid", datetime(2024, 1, 6)),
            todo("first", datetime(2024, 1, 1)),
            todo("last", datetime(2024, 1, 11)),
        ]
        timeline = project_timeline(todos, [], now=datetime(2030, 1, 1, tzinfo=UTC))
        assert positions(timeline) == {"first": 0.0, "mid": 50.0, "last": 100.0}
        assert [m.id for m in timeline.markers] == ["first", "mid", "last"]

    def test_single_date_is_centered(self):
        todos = [todo("a", datetime(2024, 5, 1, 9)), todo("b", datetime(2024, 5, 1, 9))]
        timeline = project_timeline(todos, [], now=datetime(2030, 1, 1, tzinfo=UTC))
        assert positions(timeline) == {"a": 50.0, "b": 50.0}
        assert timeline.earliest == timeline.latest

    def test_position_is_clamped(self):
        earliest = datetime(2024, 1, 1, tzinfo=UTC)
        latest = datetime(2024, 1, 11, tzinfo=UTC)
        assert timeline_position(datetime(2023, 1, 1, tzinfo=UTC), earliest, latest) == 0.0
        assert timeline_position(datetime(2025, 1, 1, tzinfo=UTC), earliest, latest) == 100.0

    def test_no_dated_todos_means_no_timeline(self):
        assert project_timeline([todo("a", None)], FOLDERS) is None
        assert project_timeline([], FOLDERS) is None

    def test_now_marker_only_inside_range(self):
        todos = [todo("a", datetime(2024, 1, 1)), todo("b", datetime(2024, 1, 11))]
        inside = project_timeline(todos, [], now=datetime(2024, 1, 3, 12, tzinfo=UTC))
        assert inside.now_position == 25.0
        before = project_timeline(todos, [], now=datetime(2023, 12, 31, tzinfo=UTC))
        assert before.now_position is None
        after = project_timeline(todos, [], now=datetime(2024, 1, 12, tzinfo=UTC))
        assert after.now_position is None

    def test_mixed_naive_and_aware_due_dates(self):
        todos = [todo("a", datetime(2024, 1, 1)), todo("b", datetime(2024, 1, 11, tzinfo=UTC))]
        timeline = project_timeline(todos, [], now=datetime(2030, 1, 1, tzinfo=UTC))
        assert positions(timeline) == {"a": 0.0, "b": 100.0}


class TestGrouping:
    def test_groups_by_day_then_folder(self):
        todos = [
            todo("t3", datetime(2024, 3, 16, 9), folder_id="art"),
            todo("t1", datetime(2024, 3, 15, 14), folder_id="math"),
            todo("t2", datetime(2024, 3, 15, 8)),
            todo("t4", datetime(2024, 3, 15, 16), folder_id="math", completed=True),
        ]
        timeline = project_timeline(todos, FOLDERS, now=datetime(2024, 3, 16, 12, tzinfo=UTC))

        assert [d.day for d in timeline.days] == [date(2024, 3, 15), date(2024, 3, 16)]
        first = timeline.days[0]
        assert [g.folder_id for g in first.groups] == [NO_FOLDER, "math"]
        assert first.groups[0].name == NO_FOLDER_LABEL
        assert first.groups[0].color == "#9CA3AF"
        assert [t.id for t in first.groups[1].tasks] == ["t1", "t4"]
        assert first.groups[1].name == "Mathematics"
        assert (first.pending, first.completed) == (2, 1)
        assert first.groups[1].tasks[0].time_label == "14:00"

    def test_day_status_relative_to_now(self):
        todos = [
            todo("past", datetime(2024, 3, 14, 23)),
            todo("today", datetime(2024, 3, 15, 1)),
            todo("future", datetime(2024, 3, 16)),
        ]
        timeline = project_timeline(todos, [], now=datetime(2024, 3, 15, 20, tzinfo=UTC))
        assert [d.status for d in timeline.days] == ["past", "today", "future"]

    def test_completed_flag_is_preserved(self):
        timeline = project_timeline(
            [todo("a", datetime(2024, 3, 15), completed=True)], [], now=datetime(2030, 1, 1, tzinfo=UTC)
        )
        assert timeline.markers[0].completed is True
        assert timeline.days[0].groups[0].tasks[0].completed is True
        assert (timeline.days[0].pending, timeline.days[0].completed) == (0, 1)

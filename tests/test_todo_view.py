"""Tests for src.core.todo_view — status, labels, filtering and sorting."""

from datetime import datetime, timezone

import pytest
from zoneinfo import ZoneInfo

from src.core.todo_view import (
    filter_todos,
    get_todo_status,
    priority_label,
    priority_sort_order,
    sort_todos,
)


class TestStatus:
    def test_completed_wins(self, now, make_todo):
        todo = make_todo(completed=True, due_at=datetime(2026, 2, 1, 9, 0))
        assert get_todo_status(todo, now) == "completed"

    def test_delayed(self, now, make_todo):
        assert get_todo_status(make_todo(due_at=datetime(2026, 2, 17, 8, 59)), now) == "delayed"

    def test_progress_future(self, now, make_todo):
        assert get_todo_status(make_todo(due_at=datetime(2026, 2, 17, 9, 1)), now) == "progress"

    def test_progress_no_due(self, now, make_todo):
        assert get_todo_status(make_todo(), now) == "progress"


class TestLabels:
    @pytest.mark.parametrize("priority,label,order", [
        ("high", "높음", 0),
        ("medium", "보통", 1),
        ("low", "낮음", 2),
        ("bogus", "보통", 1),
    ])
    def test_label_and_order(self, priority, label, order):
        assert priority_label(priority) == label
        assert priority_sort_order(priority) == order


class TestFilterTodos:
    def _todos(self, make_todo):
        return [
            make_todo(title="Team Meeting", priority="high", category="업무",
                      due_at=datetime(2026, 2, 16, 9, 0)),
            make_todo(title="장보기", priority="low", category="개인", completed=True),
            make_todo(title="meeting notes", priority="medium", category="업무"),
        ]

    def test_no_filters(self, now, make_todo):
        assert len(filter_todos(self._todos(make_todo), now)) == 3

    def test_search_is_case_insensitive(self, now, make_todo):
        titles = [t.title for t in filter_todos(self._todos(make_todo), now, query="MEETING")]
        assert titles == ["Team Meeting", "meeting notes"]

    def test_priority_filter(self, now, make_todo):
        result = filter_todos(self._todos(make_todo), now, priorities=["high", "low"])
        assert [t.priority for t in result] == ["high", "low"]

    def test_status_filter(self, now, make_todo):
        result = filter_todos(self._todos(make_todo), now, statuses=["delayed"])
        assert [t.title for t in result] == ["Team Meeting"]

    def test_category_filter(self, now, make_todo):
        result = filter_todos(self._todos(make_todo), now, category="개인")
        assert [t.title for t in result] == ["장보기"]

    def test_filters_combine(self, now, make_todo):
        result = filter_todos(
            self._todos(make_todo), now, query="meeting", category="업무", statuses=["progress"],
        )
        assert [t.title for t in result] == ["meeting notes"]


class TestSortTodos:
    def _todos(self, make_todo):
        return [
            make_todo(title="b", priority="low", due_at=datetime(2026, 2, 20, 9, 0),
                      created_at=datetime(2026, 2, 1)),
            make_todo(title="a", priority="high", created_at=datetime(2026, 2, 3)),
            make_todo(title="c", priority="medium", due_at=datetime(2026, 2, 18, 9, 0),
                      created_at=datetime(2026, 2, 2)),
        ]

    @pytest.mark.parametrize("sort_by,expected", [
        ("title_asc", ["a", "b", "c"]),
        ("title_desc", ["c", "b", "a"]),
        ("priority_asc", ["a", "c", "b"]),
        ("priority_desc", ["b", "c", "a"]),
        ("due_asc", ["c", "b", "a"]),
        ("due_desc", ["b", "c", "a"]),
        ("created_asc", ["b", "c", "a"]),
        ("created_desc", ["a", "c", "b"]),
        ("unknown", ["a", "c", "b"]),
    ])
    def test_orders(self, make_todo, sort_by, expected):
        assert [t.title for t in sort_todos(self._todos(make_todo), sort_by)] == expected

    def test_does_not_mutate_input(self, make_todo):
        todos = self._todos(make_todo)
        sort_todos(todos, "title_asc")
        assert [t.title for t in todos] == ["b", "a", "c"]

    def test_due_order_uses_zone_wall_clock(self, make_todo):
        seoul = ZoneInfo("Asia/Seoul")
        # 00:30 UTC is 09:30 in Seoul
        aware = make_todo(title="aware", due_at=datetime(2026, 2, 18, 0, 30, tzinfo=timezone.utc))
        naive = make_todo(title="naive", due_at=datetime(2026, 2, 18, 9, 0))
        result = sort_todos([aware, naive], "due_asc", seoul)
        assert [t.title for t in result] == ["naive", "aware"]

    def test_created_order_uses_zone_wall_clock(self, make_todo):
        seoul = ZoneInfo("Asia/Seoul")
        aware = make_todo(title="aware", created_at=datetime(2026, 2, 10, 1, 0, tzinfo=timezone.utc))
        naive = make_todo(title="naive", created_at=datetime(2026, 2, 10, 9, 0))
        result = sort_todos([naive, aware], "created_asc", seoul)
        assert [t.title for t in result] == ["naive", "aware"]

"""Todo list helpers: status derivation, labels, search, filter and sort.

Shared by the summary prompt renderer and by any caller that needs to show a
todo collection the same way the web client does.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, tzinfo
from typing import Literal, Protocol

from src.core.stats import to_local

TodoStatus = Literal["progress", "completed", "delayed"]

_PRIORITY_LABELS = {"high": "높음", "medium": "보통", "low": "낮음"}
_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

SORT_KEYS = (
    "title_asc", "title_desc",
    "priority_asc", "priority_desc",
    "due_asc", "due_desc",
    "created_asc", "created_desc",
)


class TodoLike(Protocol):
    title: str
    completed: bool
    due_at: datetime | None
    priority: str
    category: str | None
    created_at: datetime


def get_todo_status(todo: TodoLike, now: datetime, tz: tzinfo | None = None) -> TodoStatus:
    """Return "completed", "delayed" (past due and open) or "progress"."""
    if todo.completed:
        return "completed"
    if todo.due_at is None:
        return "progress"
    if to_local(todo.due_at, tz) < to_local(now, tz):
        return "delayed"
    return "progress"


def priority_label(priority: str) -> str:
    return _PRIORITY_LABELS.get(priority, _PRIORITY_LABELS["medium"])


def priority_sort_order(priority: str) -> int:
    return _PRIORITY_ORDER.get(priority, _PRIORITY_ORDER["medium"])


def filter_todos(
    todos: Iterable[TodoLike],
    now: datetime,
    query: str | None = None,
    priorities: Sequence[str] = (),
    statuses: Sequence[str] = (),
    category: str | None = None,
    tz: tzinfo | None = None,
) -> list[TodoLike]:
    """Apply title search and the priority/status/category filters.

    Empty filters match everything; the search is case-insensitive.
    """
    needle = query.lower() if query else None
    result = []
    for todo in todos:
        if needle and needle not in todo.title.lower():
            continue
        if priorities and todo.priority not in priorities:
            continue
        if statuses and get_todo_status(todo, now, tz) not in statuses:
            continue
        if category and todo.category != category:
            continue
        result.append(todo)
    return result


def sort_todos(
    todos: Iterable[TodoLike], sort_by: str = "created_desc", tz: tzinfo | None = None,
) -> list[TodoLike]:
    """Return todos ordered by ``sort_by`` (one of SORT_KEYS).

    Todos without a due date always go last for the due_* orders.
    Unknown keys fall back to newest first. Timestamps with an offset are
    compared as wall-clock times in ``tz``.
    """
    items = list(todos)
    if sort_by not in SORT_KEYS:
        sort_by = "created_desc"

    if sort_by in ("title_asc", "title_desc"):
        return sorted(items, key=lambda t: t.title, reverse=sort_by == "title_desc")

    if sort_by in ("priority_asc", "priority_desc"):
        return sorted(
            items,
            key=lambda t: priority_sort_order(t.priority),
            reverse=sort_by == "priority_desc",
        )

    if sort_by in ("due_asc", "due_desc"):
        with_due = [t for t in items if t.due_at is not None]
        without_due = [t for t in items if t.due_at is None]
        with_due.sort(key=lambda t: to_local(t.due_at, tz), reverse=sort_by == "due_desc")
        return with_due + without_due

    return sorted(
        items, key=lambda t: to_local(t.created_at, tz), reverse=sort_by != "created_asc",
    )

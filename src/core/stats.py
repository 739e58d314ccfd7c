"""
Todo AI Assistant: Period statistics.

Aggregates a todo collection along every dimension the summary prompt
talks about: completion by priority and category, overdue patterns,
time-of-day and day-of-week distributions, deadline adherence, and the
todos that fall due today or this week.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from typing import TYPE_CHECKING

from src.data.models import PRIORITIES

if TYPE_CHECKING:
    from src.data.models import TodoSummaryInput

logger = logging.getLogger(__name__)

UNCATEGORIZED = "미분류"

# Hour boundaries of the due-time buckets: [0,12) [12,17) [17,21) [21,24)
_AFTERNOON_START = 12
_EVENING_START = 17
_NIGHT_START = 21


@dataclass
class PriorityStat:
    total: int = 0
    completed: int = 0
    rate: int = 0


@dataclass
class CategoryStat:
    total: int = 0
    completed: int = 0
    overdue: int = 0


@dataclass
class TimeSlotDistribution:
    morning: int = 0
    afternoon: int = 0
    evening: int = 0
    night: int = 0


@dataclass
class PeriodStats:
    """Everything the summary prompt needs, computed relative to ``now``."""

    now: datetime
    today: date
    week_start: datetime      # Monday 00:00:00.000
    week_end: datetime        # Sunday 23:59:59.999
    tz: tzinfo | None = None  # zone due timestamps with an offset are read in

    total: int = 0
    completed: int = 0
    in_progress: int = 0
    overdue: int = 0
    completion_rate: int = 0
    deadline_adherence_rate: int = 0
    completed_this_week: int = 0

    today_tasks: list[TodoSummaryInput] = field(default_factory=list)
    week_tasks: list[TodoSummaryInput] = field(default_factory=list)

    priority_completion: dict[str, PriorityStat] = field(
        default_factory=lambda: {p: PriorityStat() for p in PRIORITIES}
    )
    category_completion: dict[str, CategoryStat] = field(default_factory=dict)
    time_slot_dist: TimeSlotDistribution = field(default_factory=TimeSlotDistribution)
    day_of_week_dist: list[int] = field(default_factory=lambda: [0] * 7)  # 0 = Sunday
    overdue_by_category: dict[str, int] = field(default_factory=dict)
    overdue_by_priority: dict[str, int] = field(default_factory=dict)


def completion_rate(completed: int, total: int) -> int:
    """Percentage rounded half-up, 0 for an empty population.

    Integer arithmetic keeps the result exact for every input.
    """
    if total <= 0:
        return 0
    return (completed * 200 + total) // (2 * total)


def to_local(value: datetime, tz: tzinfo | None = None) -> datetime:
    """Return ``value`` as a naive local wall-clock datetime.

    Naive values are taken to be local already; aware values are converted
    to ``tz`` (or the system zone when ``tz`` is None).
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(tz).replace(tzinfo=None)


def sunday_based_weekday(value: date) -> int:
    """Weekday index with 0 = Sunday ... 6 = Saturday."""
    return (value.weekday() + 1) % 7


def week_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Monday 00:00:00.000 through Sunday 23:59:59.999 of the week holding ``now``."""
    dow = sunday_based_weekday(now)
    monday = (now - timedelta(days=6 if dow == 0 else dow - 1)).replace(
        hour=0, minute=0, second=0, microsecond=0,
    )
    sunday = (monday + timedelta(days=6)).replace(
        hour=23, minute=59, second=59, microsecond=999000,
    )
    return monday, sunday


def _time_slot(hour: int) -> str:
    if hour < _AFTERNOON_START:
        return "morning"
    if hour < _EVENING_START:
        return "afternoon"
    if hour < _NIGHT_START:
        return "evening"
    return "night"


def compute_stats(
    todos: list[TodoSummaryInput],
    now: datetime,
    tz: tzinfo | None = None,
) -> PeriodStats:
    """Compute period statistics in a single pass over ``todos``.

    Args:
        todos: Todos to aggregate.
        now: Reference instant as a naive local datetime.
        tz: Local zone used to read due timestamps that carry an offset.
    """
    now = to_local(now, tz)
    week_start, week_end = week_bounds(now)
    stats = PeriodStats(
        now=now, today=now.date(), week_start=week_start, week_end=week_end, tz=tz,
    )

    with_due = 0
    completed_with_due = 0

    for todo in todos:
        category = todo.category or UNCATEGORIZED
        cat_stat = stats.category_completion.setdefault(category, CategoryStat())
        cat_stat.total += 1

        pri_stat = stats.priority_completion.get(todo.priority)
        if pri_stat is not None:
            pri_stat.total += 1

        stats.total += 1
        if todo.completed:
            stats.completed += 1
            cat_stat.completed += 1
            if pri_stat is not None:
                pri_stat.completed += 1

        if todo.due_at is None:
            continue

        due = to_local(todo.due_at, tz)
        with_due += 1
        if todo.completed:
            completed_with_due += 1

        slot = _time_slot(due.hour)
        setattr(stats.time_slot_dist, slot, getattr(stats.time_slot_dist, slot) + 1)
        stats.day_of_week_dist[sunday_based_weekday(due)] += 1

        if due.date() == stats.today:
            stats.today_tasks.append(todo)
        if week_start <= due <= week_end:
            stats.week_tasks.append(todo)
            if todo.completed:
                stats.completed_this_week += 1

        if not todo.completed and due < now:
            stats.overdue += 1
            cat_stat.overdue += 1
            stats.overdue_by_category[category] = stats.overdue_by_category.get(category, 0) + 1
            stats.overdue_by_priority[todo.priority] = stats.overdue_by_priority.get(todo.priority, 0) + 1

    stats.in_progress = stats.total - stats.completed
    stats.completion_rate = completion_rate(stats.completed, stats.total)
    stats.deadline_adherence_rate = completion_rate(completed_with_due, with_due)
    for pri_stat in stats.priority_completion.values():
        pri_stat.rate = completion_rate(pri_stat.completed, pri_stat.total)

    logger.debug(
        "Stats: total=%d completed=%d overdue=%d today=%d week=%d",
        stats.total, stats.completed, stats.overdue,
        len(stats.today_tasks), len(stats.week_tasks),
    )
    return stats

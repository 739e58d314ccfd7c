"""
Todo AI Assistant: Parse result postprocessing.

Repairs the model's raw answer against the domain rules before it reaches
the client: title length, due-date sanity, priority membership and empty
optional fields.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING

from src.core.prompts import LOCAL_DATETIME_FORMAT
from src.core.stats import to_local
from src.data.models import PRIORITIES, ParsedTodoResult

if TYPE_CHECKING:
    from src.data.models import RawParsedTodo

logger = logging.getLogger(__name__)

TITLE_MIN = 2
TITLE_MAX = 100
DEFAULT_TITLE = "새 할 일"
ELLIPSIS = "…"
DEFAULT_PRIORITY = "medium"

_TRAILING_PARTIAL_WORD_RE = re.compile(r"\s+\S*$")
_ZULU_RE = re.compile(r"[Zz]$")


def fix_title(raw_title: str | None) -> str:
    """Trim, replace too-short titles, cut too-long ones at a word boundary."""
    title = (raw_title or "").strip()

    if len(title) < TITLE_MIN:
        return DEFAULT_TITLE

    if len(title) > TITLE_MAX:
        cut = title[:TITLE_MAX]
        # Drop the word the limit split, unless the limit fell on a space
        if not title[TITLE_MAX].isspace():
            cut = _TRAILING_PARTIAL_WORD_RE.sub("", cut)
        title = cut.rstrip() + ELLIPSIS

    return title


def _replace_year(value: datetime, year: int) -> datetime:
    try:
        return value.replace(year=year)
    except ValueError:
        # Feb 29 in a non-leap target year
        return value.replace(year=year, day=28)


def parse_due_at(raw_due: str | None, tz: tzinfo | None = None) -> datetime | None:
    """Parse the model's due date into a naive local datetime, or None."""
    if not raw_due or not raw_due.strip():
        return None
    try:
        parsed = datetime.fromisoformat(_ZULU_RE.sub("+00:00", raw_due.strip()))
    except ValueError:
        logger.warning("Discarding unparseable due date from model: %r", raw_due)
        return None
    return to_local(parsed, tz)


def fix_due_at(raw_due: str | None, now: datetime, tz: tzinfo | None = None) -> str | None:
    """Normalize the due date to ``YYYY-MM-DDTHH:mm``.

    A date more than one year after ``now`` is almost always the model
    picking the wrong year, so its year is reset to ``now.year``. Past dates
    are kept as they are.
    """
    due = parse_due_at(raw_due, tz)
    if due is None:
        return None

    now = to_local(now, tz)
    one_year_later = _replace_year(now, now.year + 1)
    if due > one_year_later:
        logger.info("Correcting due date year %d -> %d", due.year, now.year)
        due = _replace_year(due, now.year)

    return due.strftime(LOCAL_DATETIME_FORMAT)


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def postprocess_parsed(
    raw: RawParsedTodo,
    now: datetime,
    tz: tzinfo | None = None,
) -> ParsedTodoResult:
    """Validate and repair a raw model answer into a ParsedTodoResult."""
    priority = raw.priority if raw.priority in PRIORITIES else DEFAULT_PRIORITY

    return ParsedTodoResult(
        title=fix_title(raw.title),
        due_at=fix_due_at(raw.due_at, now, tz),
        priority=priority,
        category=_clean_optional(raw.category),
        description=_clean_optional(raw.description),
    )

"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config picks up a usable model
config, and provides a fixed reference time plus a todo factory.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("LLM_API_KEY", "fake-llm-key-for-tests")
os.environ.setdefault("LLM_PROVIDER", "gemini")
os.environ.setdefault("TIMEZONE", "Asia/Seoul")
os.environ.setdefault("APP_ENV", "test")

from datetime import datetime

import pytest


# Tuesday; its week runs Mon 2026-02-16 through Sun 2026-02-22
REFERENCE_NOW = datetime(2026, 2, 17, 9, 0)


@pytest.fixture
def now():
    return REFERENCE_NOW


@pytest.fixture
def make_todo():
    """Return a factory for TodoSummaryInput with sensible defaults."""
    from src.data.models import TodoSummaryInput

    def _make(
        title="할 일",
        completed=False,
        due_at=None,
        priority="medium",
        category=None,
        created_at=datetime(2026, 2, 10, 9, 0),
    ):
        return TodoSummaryInput(
            title=title,
            completed=completed,
            due_at=due_at,
            priority=priority,
            category=category,
            created_at=created_at,
        )

    return _make

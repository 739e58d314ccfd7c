"""
Todo AI Assistant: Data Models.

Todos live in the external database; this core only ever reads them.
The AI pipelines receive a trimmed projection (TodoSummaryInput) and answer
with ephemeral results (ParsedTodoResult, TodoSummary) that are never stored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Priority = Literal["high", "medium", "low"]
Period = Literal["today", "week"]

PRIORITIES: tuple[str, ...] = ("high", "medium", "low")
PERIODS: tuple[str, ...] = ("today", "week")


class Todo(BaseModel):
    """A user-owned task record, as stored by the database collaborator.

    The completed/completed_at pairing is enforced by storage, not here.
    """

    id: str
    user_id: str | None = None
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    due_at: datetime | None = None
    priority: Priority = "medium"
    category: str | None = Field(default=None, max_length=50)
    completed: bool = False
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class TodoSummaryInput(BaseModel):
    """Read-only projection of a Todo sent to the summarize pipeline."""

    title: str
    completed: bool
    due_at: datetime | None = None
    priority: Priority
    category: str | None = None
    created_at: datetime

    @classmethod
    def from_todo(cls, todo: Todo) -> TodoSummaryInput:
        return cls(
            title=todo.title,
            completed=todo.completed,
            due_at=todo.due_at,
            priority=todo.priority,
            category=todo.category,
            created_at=todo.created_at,
        )


class ParsedTodoResult(BaseModel):
    """Structured todo extracted from natural language.

    JSON example:
    {
        "title": "회의 준비하기",
        "due_at": "2026-02-18T15:00",
        "priority": "medium",
        "category": "업무",
        "description": null
    }
    """

    title: str
    due_at: str | None = None   # YYYY-MM-DDTHH:mm, local, no offset
    priority: Priority = "medium"
    category: str | None = None
    description: str | None = None


class RawParsedTodo(BaseModel):
    """What the model answers for a parse request, before postprocessing.

    Deliberately lenient: every field is repaired by the postprocessor.
    """

    title: str | None = None
    due_at: str | None = None
    priority: str | None = None
    category: str | None = None
    description: str | None = None


class TodoSummary(BaseModel):
    """Narrative analysis of a todo set, returned as the model produced it."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str
    urgent_tasks: list[str] = Field(default_factory=list, alias="urgentTasks")
    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# HTTP request bodies
# ---------------------------------------------------------------------------


class ParseTodoRequest(BaseModel):
    text: str
    current_local_datetime: str | None = Field(default=None, alias="currentLocalDateTime")

    model_config = ConfigDict(populate_by_name=True)


class SummarizeTodosRequest(BaseModel):
    todos: list[TodoSummaryInput]
    period: Period
    current_local_datetime: str | None = Field(default=None, alias="currentLocalDateTime")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("todos", mode="before")
    @classmethod
    def require_list(cls, v: object) -> object:
        if not isinstance(v, list):
            raise ValueError("todos must be an array")
        return v

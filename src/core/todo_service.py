"""
Todo AI Assistant: Pipeline orchestrator.

Stateless service that runs the two AI pipelines end to end:

    parse:     validate -> normalize -> build prompt -> invoke -> postprocess
    summarize: validate -> aggregate stats -> build prompt -> invoke

Each transport (HTTP today) calls this service and renders the result or
the TodoAIError it raises. Nothing is retried and nothing is stored.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from enum import Enum
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from src.core.errors import (
    AnalysisFailedError,
    EmptyInputError,
    InvalidInputError,
    TodoAIError,
    TooManyItemsError,
)
from src.core.postprocessor import postprocess_parsed
from src.core.prompts import LOCAL_DATETIME_FORMAT, build_parse_prompt, build_summary_prompt
from src.core.sanitizer import MIN_LENGTH, normalize_text, validate_text
from src.core.stats import compute_stats
from src.data.models import PERIODS, ParsedTodoResult, RawParsedTodo, TodoSummary, TodoSummaryInput

if TYPE_CHECKING:
    from src.config import Settings
    from src.ports.model_port import ModelPort

logger = logging.getLogger(__name__)

MAX_SUMMARY_TODOS = 200

_ACCEPTED_DATETIME_FORMATS = (LOCAL_DATETIME_FORMAT, "%Y-%m-%dT%H:%M:%S")


class PipelineStage(Enum):
    VALIDATING = "validating"
    SANITIZING = "sanitizing"
    PROMPT_BUILDING = "prompt_building"
    INVOKING = "invoking"
    POSTPROCESSING = "postprocessing"
    DONE = "done"
    FAILED = "failed"


def parse_reference_datetime(value: str | None, tz: tzinfo | None = None) -> datetime:
    """Parse the client's ``currentLocalDateTime`` into a naive local datetime.

    When omitted, the current wall-clock time in ``tz`` is used.

    Raises:
        InvalidInputError: if the value is present but malformed.
    """
    if value is None or not str(value).strip():
        return datetime.now(tz).replace(tzinfo=None, second=0, microsecond=0)

    if not isinstance(value, str):
        raise InvalidInputError("The current date and time has an invalid format.")

    for fmt in _ACCEPTED_DATETIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
    raise InvalidInputError("The current date and time has an invalid format.")


class TodoAIService:
    """Runs the parse and summarize pipelines against a model port."""

    def __init__(self, invoker: ModelPort, tz: tzinfo | None = None, debug: bool = False) -> None:
        self._invoker = invoker
        self._tz = tz
        self._debug = debug

    @classmethod
    def from_settings(cls, settings: Settings) -> TodoAIService:
        from src.core.llm import ModelConfig, ModelInvoker

        invoker = ModelInvoker(ModelConfig.from_settings(settings))
        return cls(invoker, tz=ZoneInfo(settings.TIMEZONE), debug=settings.is_development)

    def _enter(self, pipeline: str, stage: PipelineStage) -> PipelineStage:
        logger.debug("%s: %s", pipeline, stage.value)
        return stage

    def _fail(self, pipeline: str, stage: PipelineStage, exc: Exception) -> TodoAIError:
        error = exc if isinstance(exc, TodoAIError) else AnalysisFailedError(
            f"{type(exc).__name__}: {exc}"
        )
        if isinstance(error, InvalidInputError):
            logger.info("%s rejected at %s: %s", pipeline, stage.value, error)
        else:
            logger.error(
                "%s failed at %s (%s): %s",
                pipeline, stage.value, error.kind.value, error,
                exc_info=self._debug,
            )
        return error

    # -----------------------------------------------------------------------
    # Parse pipeline
    # -----------------------------------------------------------------------

    async def parse_todo(
        self, text: object, current_local_datetime: str | None = None,
    ) -> ParsedTodoResult:
        """Turn free text into a structured todo.

        Raises:
            TodoAIError: a typed failure, never a partial result.
        """
        pipeline = "parse_todo"
        stage = self._enter(pipeline, PipelineStage.VALIDATING)
        try:
            validated = validate_text(text)
            now = parse_reference_datetime(current_local_datetime, self._tz)

            stage = self._enter(pipeline, PipelineStage.SANITIZING)
            sanitized = normalize_text(validated.text)
            if len(sanitized) < MIN_LENGTH:
                raise InvalidInputError("Please enter meaningful content.")

            stage = self._enter(pipeline, PipelineStage.PROMPT_BUILDING)
            spec = build_parse_prompt(sanitized, now)

            stage = self._enter(pipeline, PipelineStage.INVOKING)
            raw = await self._invoker.invoke(spec)
            if not isinstance(raw, RawParsedTodo):
                raw = RawParsedTodo.model_validate(raw.model_dump())

            stage = self._enter(pipeline, PipelineStage.POSTPROCESSING)
            result = postprocess_parsed(raw, now, self._tz)
        except Exception as exc:
            self._enter(pipeline, PipelineStage.FAILED)
            error = self._fail(pipeline, stage, exc)
            if error is exc:
                raise
            raise error from exc

        self._enter(pipeline, PipelineStage.DONE)
        logger.info("Parsed todo: %r due %s", result.title, result.due_at)
        return result

    # -----------------------------------------------------------------------
    # Summarize pipeline
    # -----------------------------------------------------------------------

    async def summarize_todos(
        self,
        todos: object,
        period: object,
        current_local_datetime: str | None = None,
    ) -> TodoSummary:
        """Analyze a todo set for ``period`` ("today" or "week").

        Raises:
            TodoAIError: a typed failure, never a partial result.
        """
        pipeline = "summarize_todos"
        stage = self._enter(pipeline, PipelineStage.VALIDATING)
        try:
            items = self._validate_todos(todos)
            if period not in PERIODS:
                raise InvalidInputError("Period must be 'today' or 'week'.")
            now = parse_reference_datetime(current_local_datetime, self._tz)

            stage = self._enter(pipeline, PipelineStage.PROMPT_BUILDING)
            stats = compute_stats(items, now, self._tz)
            spec = build_summary_prompt(stats, period)

            stage = self._enter(pipeline, PipelineStage.INVOKING)
            summary = await self._invoker.invoke(spec)
            if not isinstance(summary, TodoSummary):
                summary = TodoSummary.model_validate(summary.model_dump())
        except Exception as exc:
            self._enter(pipeline, PipelineStage.FAILED)
            error = self._fail(pipeline, stage, exc)
            if error is exc:
                raise
            raise error from exc

        self._enter(pipeline, PipelineStage.DONE)
        logger.info(
            "Summarized %d todos for %s (%d insights)", len(items), period, len(summary.insights),
        )
        return summary

    @staticmethod
    def _validate_todos(todos: object) -> list[TodoSummaryInput]:
        if not isinstance(todos, list):
            raise InvalidInputError("Todos must be a list.")
        if not todos:
            raise EmptyInputError()
        if len(todos) > MAX_SUMMARY_TODOS:
            raise TooManyItemsError()
        try:
            return [
                t if isinstance(t, TodoSummaryInput) else TodoSummaryInput.model_validate(t)
                for t in todos
            ]
        except ValidationError as exc:
            raise InvalidInputError("One or more todos have an invalid format.") from exc

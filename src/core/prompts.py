"""
Todo AI Assistant: Prompt builders.

Turns sanitized text or aggregated statistics into a PromptSpec: the
instruction text sent to the model plus the output schema its reply must
follow. The date, time, priority and category rules live in the prompt
text only; the model applies them, nothing here computes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from src.core.stats import to_local
from src.core.todo_view import get_todo_status, priority_label, sort_todos
from src.data.models import PRIORITIES, RawParsedTodo, TodoSummary

if TYPE_CHECKING:
    from src.core.stats import PeriodStats
    from src.data.models import TodoSummaryInput

LOCAL_DATETIME_FORMAT = "%Y-%m-%dT%H:%M"


@dataclass(frozen=True)
class PromptSpec:
    """A prompt plus the structured-output contract of its reply."""

    name: str                       # "parse_todo" | "summarize_todos"
    prompt: str
    schema: dict[str, Any]          # OpenAPI-subset object schema
    response_model: type[BaseModel]


# ---------------------------------------------------------------------------
# Output schemas
# ---------------------------------------------------------------------------

PARSED_TODO_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "description": "할 일의 핵심 제목 (간결한 동사형, 날짜·시간 표현 제외)",
        },
        "due_at": {
            "type": "string",
            "nullable": True,
            "description": "마감일시 YYYY-MM-DDTHH:mm (로컬 시간). 날짜·시간 언급이 없으면 null",
        },
        "priority": {
            "type": "string",
            "enum": list(PRIORITIES),
            "description": "high(중요·긴급), medium(일반), low(여유)",
        },
        "category": {
            "type": "string",
            "nullable": True,
            "description": "업무/개인/건강/학습 중 하나. 불명확하면 null",
        },
        "description": {
            "type": "string",
            "nullable": True,
            "description": "제목에 담기 어려운 핵심 맥락. 불필요하면 null",
        },
    },
    "required": ["title", "due_at", "priority", "category", "description"],
}

TODO_SUMMARY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "전체 상황을 1~2문장으로 요약",
        },
        "urgentTasks": {
            "type": "array",
            "items": {"type": "string"},
            "description": "즉시 처리가 필요한 할 일 제목 (최대 3개, 없으면 빈 배열)",
        },
        "insights": {
            "type": "array",
            "items": {"type": "string"},
            "description": "데이터 기반 인사이트 2~4개",
        },
        "recommendations": {
            "type": "array",
            "items": {"type": "string"},
            "description": "실행 가능한 추천 2~3개",
        },
    },
    "required": ["summary", "urgentTasks", "insights", "recommendations"],
}


# ---------------------------------------------------------------------------
# Parse prompt
# ---------------------------------------------------------------------------

_PARSE_PROMPT = """\
당신은 자연어로 입력된 할 일을 구조화된 JSON으로 변환하는 도우미입니다.
반드시 스키마에 정의된 JSON 형식으로만 응답하세요.

현재 날짜/시간 (로컬): {now}

[1. 제목(title)]
- 할 일의 핵심 동작만 간결하게 뽑아냅니다
- 날짜·시간·우선순위 표현은 제목에서 뺍니다
- 동사형으로 끝맺습니다 (예: "팀 회의 준비하기")

[2. 마감일(due_at): YYYY-MM-DDTHH:mm, 로컬 시간]
날짜 계산 (현재 날짜 기준):
- "오늘" → 현재 날짜
- "내일" → 현재 날짜 + 1일
- "모레" → 현재 날짜 + 2일
- "이번 주 N요일" → 현재 날짜 이후 가장 가까운 해당 요일 (이미 지났으면 다음 주)
- "다음 주 N요일" → 다음 주의 해당 요일
- "N월 N일" → 해당 날짜 (연도는 현재 연도, 이미 지났으면 다음 연도)

시간 변환:
- "아침" → 08:00
- "오전 N시" → N:00 (N은 1~11)
- "점심", "낮" → 12:00
- "오후" → 15:00
- "오후 N시" → N이 12 미만이면 N+12, 아니면 N (:00)
- "저녁" → 18:00
- "밤", "야간" → 21:00
- "N시 N분" → 그대로
- 시간 언급 없음 → 09:00

날짜와 시간 모두 언급이 없으면 null

[3. 우선순위(priority)]
- high: "급하게", "급히", "중요한", "빨리", "꼭", "반드시", "긴급", "즉시", "오늘 마감"
- low: "여유롭게", "천천히", "언젠가", "나중에", "시간 될 때", "여유 있을 때"
- medium: 위 표현이 없거나 일반적인 경우 (기본값)

[4. 카테고리(category)]
- "업무": 회의, 보고서, 프로젝트, 업무, 팀, 직장, 클라이언트, 발표, 기획
- "개인": 쇼핑, 친구, 가족, 약속, 취미, 집안일, 개인 용무
- "건강": 운동, 병원, 건강, 요가, 헬스, 약, 검진, 식단
- "학습": 공부, 책, 강의, 학습, 자격증, 독서, 튜토리얼, 과제
- 해당 없음 또는 불명확 → null

[5. 설명(description)]
- 제목에 담기 어려운 핵심 맥락만 적습니다
- 단순 반복이거나 불필요하면 null

입력: "{text}"
"""


def build_parse_prompt(sanitized_text: str, now: datetime) -> PromptSpec:
    """Build the natural-language → todo prompt.

    Args:
        sanitized_text: Output of ``normalize_text`` (no quotes left in it).
        now: Reference local date/time that relative dates resolve against.
    """
    return PromptSpec(
        name="parse_todo",
        prompt=_PARSE_PROMPT.format(
            now=now.strftime(LOCAL_DATETIME_FORMAT), text=sanitized_text,
        ),
        schema=PARSED_TODO_SCHEMA,
        response_model=RawParsedTodo,
    )


# ---------------------------------------------------------------------------
# Summary prompt
# ---------------------------------------------------------------------------

_DAY_NAMES = ("일", "월", "화", "수", "목", "금", "토")  # 0 = Sunday
_PERIOD_LABELS = {"today": "오늘", "week": "이번 주"}

_SUMMARY_PROMPT = """\
당신은 공감 능력이 뛰어난 생산성 코치입니다.
아래 데이터를 바탕으로 사용자의 {period_label} 할 일 현황을 분석해 주세요.
반드시 한국어로, 친근하고 자연스러운 문체로 작성하세요.

{stats_block}

=== 작성 원칙 ===

[summary: 1~2문장 전체 요약]
- "{period_label}" 관점에서 현황을 요약합니다
- 완료율, 지연 현황, 핵심 성과 중 가장 인상적인 수치 1~2개를 포함합니다
- 격려 또는 집중을 이끄는 말로 마무리합니다

[urgentTasks: 최대 3개 제목]
- 조건: 미완료 AND (high 우선순위 OR 마감 초과 OR 오늘 마감)
- 해당 항목이 없으면 빈 배열 []
- 설명 없이 제목만 반환합니다

[insights: 2~4개, 구체적 수치와 패턴]
데이터에서 의미 있는 관점을 골라 작성하세요:
- 완료율 분석: 전체 완료율과 우선순위별 완료 패턴 비교
- 시간 관리 분석: 마감일 준수율, 지연 빈도, 시간대 집중도
- 생산성 패턴: 자주 지연되는 카테고리, 쉽게 끝내는 작업의 특징
- 긍정적 성과: 잘하고 있는 부분을 구체적으로 칭찬

[recommendations: 2~3개 실행 가능한 조언]
현재 데이터에 가장 맞는 전략을 골라 구체적으로 작성하세요:
- 시간 관리: 오전/오후 집중 시간 배분 제안
- 우선순위 조정: 현재 분포를 바탕으로 한 재배치 제안
- 과부하 분산: 특정 날짜·시간대 쏠림 완화
- {period_focus}
- 동기부여: 격려와 구체적인 다음 행동 한 문장

[주의사항]
- 데이터에 없는 내용은 추측하지 않습니다
- 수치가 없으면 패턴 기반 정성 분석으로 대신합니다
- 각 항목은 1~2문장으로 간결하게 씁니다
"""

_PERIOD_FOCUS = {
    "today": "오늘 남은 시간 활용: 남은 시간에 끝낼 수 있는 항목과 순서 제안",
    "week": "다음 주 계획: 이번 주 패턴을 바탕으로 한 다음 주 일정 배분 전략",
}

_STATUS_MARKS = {"completed": "✓완료", "delayed": "!지연", "progress": "○미완료"}


def format_todo_line(todo: TodoSummaryInput, now: datetime, tz: tzinfo | None = None) -> str:
    """Render one todo as a prompt line, e.g. ``- ○미완료 [업무] "보고서" (높음 우선순위, 마감: 2026-02-17T15:00)``."""
    status = _STATUS_MARKS[get_todo_status(todo, now, tz)]
    due = (
        f"마감: {to_local(todo.due_at, tz).strftime(LOCAL_DATETIME_FORMAT)}"
        if todo.due_at is not None else "마감 없음"
    )
    category = f"[{todo.category}] " if todo.category else ""
    return f'- {status} {category}"{todo.title}" ({priority_label(todo.priority)} 우선순위, {due})'


def format_todos(
    todos: list[TodoSummaryInput], now: datetime, tz: tzinfo | None = None,
) -> str:
    if not todos:
        return "(없음)"
    return "\n".join(format_todo_line(t, now, tz) for t in sort_todos(todos, "due_asc", tz))


def build_stats_block(stats: PeriodStats, period: str) -> str:
    """Serialize every aggregate of ``stats`` into the prompt's data section."""
    target = stats.today_tasks if period == "today" else stats.week_tasks
    period_label = _PERIOD_LABELS[period]

    category_summary = " / ".join(
        f"{name} {c.total}개(완료 {c.completed}개, 지연 {c.overdue}개)"
        for name, c in stats.category_completion.items()
    ) or "(데이터 없음)"

    p = stats.priority_completion
    slots = stats.time_slot_dist
    day_dist = " / ".join(
        f"{_DAY_NAMES[i]}요일 {count}개"
        for i, count in enumerate(stats.day_of_week_dist) if count > 0
    ) or "(데이터 없음)"
    overdue_by_category = ", ".join(
        f"{k} {v}개" for k, v in stats.overdue_by_category.items()
    ) or "없음"
    overdue_by_priority = ", ".join(
        f"{k} {v}개" for k, v in stats.overdue_by_priority.items()
    ) or "없음"

    # Today's and this week's todos without repeats
    ids = {id(t) for t in stats.today_tasks}
    combined = stats.today_tasks + [t for t in stats.week_tasks if id(t) not in ids]

    lines = [
        "=== 현재 시각 ===",
        f"{stats.now.strftime(LOCAL_DATETIME_FORMAT)} (오늘: {stats.today.isoformat()}, "
        f"이번 주: {stats.week_start.date().isoformat()} ~ {stats.week_end.date().isoformat()})",
        "",
        "=== 전체 완료율 분석 ===",
        f"- 전체: {stats.total}개 / 완료: {stats.completed}개 ({stats.completion_rate}%) "
        f"/ 진행 중: {stats.in_progress}개",
        f"- 마감 초과(지연): {stats.overdue}개",
        f"- 마감일 준수율(마감 있는 항목 기준): {stats.deadline_adherence_rate}%",
        f"- 이번 주 완료: {stats.completed_this_week}개",
        "",
        "=== 우선순위별 완료 패턴 ===",
        f"- 높음(high): 전체 {p['high'].total}개 중 {p['high'].completed}개 완료 ({p['high'].rate}%)",
        f"- 보통(medium): 전체 {p['medium'].total}개 중 {p['medium'].completed}개 완료 ({p['medium'].rate}%)",
        f"- 낮음(low): 전체 {p['low'].total}개 중 {p['low'].completed}개 완료 ({p['low'].rate}%)",
        "",
        "=== 카테고리별 현황 ===",
        category_summary,
        "",
        "=== 시간대별 업무 집중도 ===",
        f"- 오전(~12시): {slots.morning}개 / 오후(12~17시): {slots.afternoon}개 "
        f"/ 저녁(17~21시): {slots.evening}개 / 야간(21시~): {slots.night}개",
        f"- 요일별 마감 분포: {day_dist}",
        "",
        "=== 지연 패턴 분석 ===",
        f"- 카테고리별 지연: {overdue_by_category}",
        f"- 우선순위별 지연: {overdue_by_priority}",
        "",
        f"=== {period_label} 할 일 ({len(target)}개) ===",
        format_todos(target, stats.now, stats.tz),
        "",
        "=== 오늘·이번 주 할 일 목록 ===",
        format_todos(combined, stats.now, stats.tz),
    ]
    return "\n".join(lines)


def build_summary_prompt(stats: PeriodStats, period: str) -> PromptSpec:
    """Build the todo-set analysis prompt for ``period`` ("today" | "week")."""
    return PromptSpec(
        name="summarize_todos",
        prompt=_SUMMARY_PROMPT.format(
            period_label=_PERIOD_LABELS[period],
            stats_block=build_stats_block(stats, period),
            period_focus=_PERIOD_FOCUS[period],
        ),
        schema=TODO_SUMMARY_SCHEMA,
        response_model=TodoSummary,
    )

"""Tests for src.core.prompts — prompt and schema construction."""

from datetime import datetime, timezone

from zoneinfo import ZoneInfo

from src.core.prompts import (
    PARSED_TODO_SCHEMA,
    TODO_SUMMARY_SCHEMA,
    build_parse_prompt,
    build_stats_block,
    build_summary_prompt,
    format_todo_line,
    format_todos,
)
from src.core.stats import compute_stats
from src.data.models import RawParsedTodo, TodoSummary


class TestParsePrompt:
    def test_embeds_text_and_now(self, now):
        spec = build_parse_prompt("내일 오후 3시 회의", now)
        assert spec.name == "parse_todo"
        assert "2026-02-17T09:00" in spec.prompt
        assert '입력: "내일 오후 3시 회의"' in spec.prompt

    def test_contract(self, now):
        spec = build_parse_prompt("회의", now)
        assert spec.schema is PARSED_TODO_SCHEMA
        assert spec.response_model is RawParsedTodo

    def test_schema_fields(self):
        props = PARSED_TODO_SCHEMA["properties"]
        assert set(props) == {"title", "due_at", "priority", "category", "description"}
        assert props["priority"]["enum"] == ["high", "medium", "low"]
        assert props["due_at"]["nullable"] is True


class TestFormatTodos:
    def test_line_open_with_due(self, now, make_todo):
        todo = make_todo(title="보고서", category="업무", priority="high",
                         due_at=datetime(2026, 2, 17, 15, 0))
        line = format_todo_line(todo, now)
        assert line == '- ○미완료 [업무] "보고서" (높음 우선순위, 마감: 2026-02-17T15:00)'

    def test_line_delayed(self, now, make_todo):
        line = format_todo_line(make_todo(due_at=datetime(2026, 2, 16, 9, 0)), now)
        assert "!지연" in line

    def test_line_completed_without_due(self, now, make_todo):
        line = format_todo_line(make_todo(completed=True), now)
        assert "✓완료" in line
        assert "마감 없음" in line

    def test_empty(self, now):
        assert format_todos([], now) == "(없음)"

    def test_ordered_by_due(self, now, make_todo):
        later = make_todo(title="later", due_at=datetime(2026, 2, 20, 9, 0))
        sooner = make_todo(title="sooner", due_at=datetime(2026, 2, 18, 9, 0))
        text = format_todos([later, sooner], now)
        assert text.index("sooner") < text.index("later")

    def test_ordered_by_local_due_with_mixed_offsets(self, now, make_todo):
        seoul = ZoneInfo("Asia/Seoul")
        # 01:00 UTC is 10:00 in Seoul, after the naive 09:30
        aware = make_todo(title="aware", due_at=datetime(2026, 2, 18, 1, 0, tzinfo=timezone.utc))
        naive = make_todo(title="naive", due_at=datetime(2026, 2, 18, 9, 30))
        text = format_todos([aware, naive], now, seoul)
        assert text.index("naive") < text.index("aware")

    def test_priority_label_used(self, now, make_todo):
        assert "낮음 우선순위" in format_todo_line(make_todo(priority="low"), now)


class TestSummaryPrompt:
    def _stats(self, now, make_todo):
        todos = [
            make_todo(title="오늘 회의", category="업무", due_at=datetime(2026, 2, 17, 15, 0)),
            make_todo(title="금요일 운동", category="건강", due_at=datetime(2026, 2, 20, 19, 0)),
            make_todo(title="지난 과제", completed=True, due_at=datetime(2026, 2, 10, 9, 0)),
        ]
        return compute_stats(todos, now)

    def test_stats_block_contains_aggregates(self, now, make_todo):
        block = build_stats_block(self._stats(now, make_todo), "week")
        assert "전체: 3개 / 완료: 1개 (33%)" in block
        assert "업무 1개(완료 0개, 지연 0개)" in block
        assert "이번 주: 2026-02-16 ~ 2026-02-22" in block
        assert "=== 이번 주 할 일 (2개) ===" in block

    def test_today_period_lists_today_only(self, now, make_todo):
        block = build_stats_block(self._stats(now, make_todo), "today")
        section = block.split("=== 오늘 할 일 (1개) ===")[1].split("===")[0]
        assert "오늘 회의" in section
        assert "금요일 운동" not in section

    def test_combined_list_has_no_duplicates(self, now, make_todo):
        block = build_stats_block(self._stats(now, make_todo), "week")
        combined = block.split("=== 오늘·이번 주 할 일 목록 ===")[1]
        assert combined.count("오늘 회의") == 1

    def test_summary_prompt_contract(self, now, make_todo):
        spec = build_summary_prompt(self._stats(now, make_todo), "today")
        assert spec.name == "summarize_todos"
        assert spec.schema is TODO_SUMMARY_SCHEMA
        assert spec.response_model is TodoSummary
        assert "오늘 남은 시간 활용" in spec.prompt

    def test_week_focus(self, now, make_todo):
        spec = build_summary_prompt(self._stats(now, make_todo), "week")
        assert "다음 주 계획" in spec.prompt

"""Tests for HistoryCompactor."""

from unittest.mock import Mock

import pytest

from history_compactor.context.blocks import SUMMARY_FLAG
from history_compactor.context.compactor import (
    DEFAULT_RECENT_BUDGET,
    DEFAULT_TRIGGER_BUDGET,
    CompactionResult,
    HistoryCompactor,
)
from history_compactor.context.exceptions import (
    CompactionError,
    CountMismatchError,
    SummarizationFailedError,
)
from history_compactor.context.metrics import CompactionStats
from history_compactor.messages import Message, Role


def _uniform(tokens: int):
    return Mock(side_effect=lambda messages: [tokens] * len(messages))


def _summaries(messages) -> list[Message]:
    return [m for m in messages if m is not None and m.has_flag(SUMMARY_FLAG)]


class TestConfiguration:
    """Budget defaults and helpers."""

    def test_non_positive_budgets_use_defaults(self, summarizer):
        compactor = HistoryCompactor(
            summarizer, counter=_uniform(1), trigger_budget=0, recent_budget=-5
        )
        assert compactor.trigger_budget == DEFAULT_TRIGGER_BUDGET
        assert compactor.recent_budget == DEFAULT_RECENT_BUDGET

    def test_positive_budgets_kept(self, summarizer):
        compactor = HistoryCompactor(
            summarizer, counter=_uniform(1), trigger_budget=60, recent_budget=25
        )
        assert compactor.trigger_budget == 60
        assert compactor.recent_budget == 25

    def test_should_compact_boundary(self, summarizer, scenario_history):
        """Trigger is strictly greater-than."""
        compactor = HistoryCompactor(summarizer, counter=_uniform(10), trigger_budget=80)
        assert compactor.should_compact(scenario_history) is False

        compactor = HistoryCompactor(summarizer, counter=_uniform(10), trigger_budget=79)
        assert compactor.should_compact(scenario_history) is True

    def test_get_current_usage(self, summarizer, scenario_history):
        compactor = HistoryCompactor(summarizer, counter=_uniform(10), trigger_budget=160)
        tokens, percent = compactor.get_current_usage(scenario_history)

        assert tokens == 80
        assert percent == pytest.approx(50.0)


class TestIdlePath:
    """No-op behaviour under the trigger budget."""

    def test_empty_history_returned_without_counting(self, summarizer):
        counter = _uniform(10)
        compactor = HistoryCompactor(summarizer, counter=counter, trigger_budget=1)
        history: list = []

        assert compactor.compact(history) is history
        counter.assert_not_called()
        summarizer.assert_not_called()

    def test_under_budget_returns_same_list(self, summarizer, scenario_history):
        compactor = HistoryCompactor(summarizer, counter=_uniform(10), trigger_budget=80)

        result = compactor.compact(scenario_history)

        assert result is scenario_history
        summarizer.assert_not_called()

    def test_under_budget_result_not_compacted(self, summarizer, scenario_history):
        compactor = HistoryCompactor(summarizer, counter=_uniform(1), trigger_budget=100)

        result = compactor.compact_with_result(scenario_history)

        assert result.compacted is False
        assert result.initial_tokens == result.final_tokens == 8


class TestCountMismatch:
    """Counter contract violations."""

    @pytest.mark.parametrize("counts", [[10] * 7, [10] * 9])
    def test_wrong_length_raises(self, summarizer, scenario_history, counts):
        compactor = HistoryCompactor(
            summarizer, counter=Mock(return_value=counts), trigger_budget=1
        )

        with pytest.raises(CountMismatchError) as excinfo:
            compactor.compact(scenario_history)

        assert excinfo.value.message_count == 8
        assert excinfo.value.token_count == len(counts)
        assert isinstance(excinfo.value, CompactionError)
        summarizer.assert_not_called()

    def test_counter_error_propagates_unchanged(self, summarizer, scenario_history):
        counter = Mock(side_effect=RuntimeError("tokenizer down"))
        compactor = HistoryCompactor(summarizer, counter=counter, trigger_budget=1)

        with pytest.raises(RuntimeError, match="tokenizer down"):
            compactor.compact(scenario_history)


class TestCompaction:
    """Compaction over the trigger budget."""

    @pytest.fixture
    def compactor(self, summarizer):
        return HistoryCompactor(
            summarizer, counter=_uniform(10), trigger_budget=60, recent_budget=25
        )

    def test_end_to_end_scenario(self, compactor, summarizer, scenario_history):
        """80 tokens > 60: tool block and draft are summarized, last two kept."""
        result = compactor.compact_with_result(scenario_history)

        assert result.compacted is True
        assert result.initial_tokens == 80
        assert result.older_blocks == 2  # tool-call block (30) + draft (10)
        assert result.recent_blocks == 2
        assert result.final_tokens == 40
        assert result.summary_tokens == 10

        new = result.messages
        assert new[0] is scenario_history[0]
        assert new[1] is scenario_history[1]
        assert new[2].role is Role.ASSISTANT
        assert new[2].content == "Summary of earlier work."
        assert new[2].has_flag(SUMMARY_FLAG)
        assert new[3:] == scenario_history[6:]
        summarizer.assert_called_once()

    def test_summarizer_receives_five_rendered_fields(
        self, compactor, summarizer, scenario_history
    ):
        compactor.compact(scenario_history)

        fields = summarizer.call_args.args[0]
        assert set(fields) == {
            "system_prompt",
            "user_messages",
            "previous_summary",
            "older_messages",
            "recent_messages",
        }
        assert fields["system_prompt"] == "[system]\nYou are a report writer.\n\n"
        assert fields["user_messages"] == "[user]\nWrite a long report.\n\n"
        assert fields["previous_summary"] == ""
        assert "tool_call: repeat_sections" in fields["older_messages"]
        assert "[tool:repeat_sections]\n## A" in fields["older_messages"]
        assert "Draft done." in fields["older_messages"]
        assert fields["recent_messages"] == (
            "[user]\nAdd a conclusion.\n\n[assistant]\nConclusion added.\n\n"
        )

    def test_input_not_mutated(self, compactor, scenario_history):
        snapshot = list(scenario_history)

        new = compactor.compact(scenario_history)

        assert new is not scenario_history
        assert scenario_history == snapshot

    def test_leading_blocks_preserved(self, summarizer):
        """System and every leading user message survive compaction verbatim."""
        history = [
            Message.system("sys"),
            Message.user("first"),
            Message.user("second"),
        ] + [Message.assistant(f"step {i}") for i in range(6)]
        compactor = HistoryCompactor(
            summarizer, counter=_uniform(10), trigger_budget=50, recent_budget=10
        )

        new = compactor.compact(history)

        assert new[:3] == history[:3]
        assert new[4:] == [history[-1]]

    def test_exactly_one_summary_after_repeat_compaction(self, summarizer):
        """A previous summary is folded into the new one, not kept."""
        compactor = HistoryCompactor(
            summarizer, counter=_uniform(10), trigger_budget=30, recent_budget=10
        )
        history = [Message.system("s"), Message.user("u")] + [
            Message.assistant(f"a{i}") for i in range(4)
        ]

        first = compactor.compact(history)
        second = compactor.compact(first + [Message.assistant("a4"), Message.assistant("a5")])

        summaries = _summaries(second)
        assert len(summaries) == 1
        assert second.index(summaries[0]) == 2
        fields = summarizer.call_args.args[0]
        assert "Summary of earlier work." in fields["previous_summary"]

    def test_summary_position_without_system(self, summarizer):
        history = [Message.user("u")] + [Message.assistant(f"a{i}") for i in range(5)]
        compactor = HistoryCompactor(
            summarizer, counter=_uniform(10), trigger_budget=20, recent_budget=10
        )

        new = compactor.compact(history)

        assert new[0] is history[0]
        assert new[1].has_flag(SUMMARY_FLAG)
        assert new[2:] == [history[-1]]

    def test_large_block_stops_recent_scan(self, summarizer, scenario_history):
        """Recent stops at the first block over budget, scanning from the newest."""
        counter = Mock(side_effect=[[1, 1, 5, 5, 5, 50, 1, 1], [4]])
        compactor = HistoryCompactor(
            summarizer, counter=counter, trigger_budget=20, recent_budget=20
        )

        new = compactor.compact(scenario_history)

        # draft (50) blocks the scan; tool block is older even though it fits
        assert new[3:] == scenario_history[6:]

    def test_summary_message_shape(self, compactor, scenario_history):
        result = compactor.compact_with_result(scenario_history)

        summary = result.summary
        assert summary is result.messages[2]
        assert summary.name == "summary"
        assert summary.tool_calls == ()
        assert summary.extra_flags == {SUMMARY_FLAG: True}


class TestSummarizationFailure:
    """Failures leave the caller's history untouched."""

    def test_summarizer_error_wrapped(self, scenario_history):
        boom = ConnectionError("model unavailable")
        compactor = HistoryCompactor(
            Mock(side_effect=boom), counter=_uniform(10), trigger_budget=60
        )
        snapshot = list(scenario_history)

        with pytest.raises(SummarizationFailedError) as excinfo:
            compactor.compact(scenario_history)

        assert excinfo.value.original is boom
        assert excinfo.value.__cause__ is boom
        assert scenario_history == snapshot
        assert _summaries(scenario_history) == []

    def test_response_without_content_is_failure(self, scenario_history):
        compactor = HistoryCompactor(
            Mock(return_value=object()), counter=_uniform(10), trigger_budget=60
        )

        with pytest.raises(SummarizationFailedError):
            compactor.compact(scenario_history)

    def test_retry_after_failure_uses_same_history(self, scenario_history):
        summarizer = Mock(
            side_effect=[TimeoutError("cancelled"), Message.assistant("ok")]
        )
        compactor = HistoryCompactor(
            summarizer, counter=_uniform(10), trigger_budget=60, recent_budget=25
        )

        with pytest.raises(SummarizationFailedError):
            compactor.compact(scenario_history)
        new = compactor.compact(scenario_history)

        assert new[2].content == "ok"
        assert summarizer.call_count == 2
        assert summarizer.call_args_list[0] == summarizer.call_args_list[1]


class TestCompactionResult:
    def test_defaults(self):
        result = CompactionResult(messages=[], compacted=False, initial_tokens=0, final_tokens=0)
        assert result.older_blocks == 0
        assert result.recent_blocks == 0
        assert result.summary is None


class TestCompactionStats:
    def test_tokens_saved_counts_summary(self, summarizer, scenario_history):
        compactor = HistoryCompactor(
            summarizer, counter=_uniform(10), trigger_budget=60, recent_budget=25
        )
        stats = CompactionStats()

        stats.record(compactor.compact_with_result(scenario_history))

        # 80 before; 40 kept plus a 10-token summary after
        assert stats.total_tokens_saved == 30
        assert stats.blocks_summarized == 2
        assert "Tokens saved: 30" in stats.summary()

    def test_idle_check_saves_nothing(self, summarizer, scenario_history):
        compactor = HistoryCompactor(summarizer, counter=_uniform(10), trigger_budget=100)
        stats = CompactionStats()

        stats.record(compactor.compact_with_result(scenario_history))

        assert stats.total_checks == 1
        assert stats.total_compactions == 0
        assert stats.total_tokens_saved == 0

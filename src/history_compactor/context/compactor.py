"""History compaction for keeping agent conversations within a token budget."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

from history_compactor.context.blocks import (
    SUMMARY_FLAG,
    Block,
    partition_history,
    split_recent,
)
from history_compactor.context.exceptions import (
    CountMismatchError,
    SummarizationFailedError,
)
from history_compactor.context.rendering import render_messages
from history_compactor.context.token_counter import TokenCounter
from history_compactor.messages import Message, Role

LOGGER = logging.getLogger(__name__)

DEFAULT_TRIGGER_BUDGET = 128 * 1024
DEFAULT_RECENT_BUDGET = 25 * 1024

Counter = Callable[[Sequence[Optional[Message]]], Sequence[int]]
Summarizer = Callable[[Mapping[str, str]], Any]


@dataclass
class CompactionResult:
    """Result of a compaction check."""

    messages: list[Optional[Message]]
    compacted: bool
    initial_tokens: int
    final_tokens: int  # tokens of kept messages, summary excluded
    older_blocks: int = 0
    recent_blocks: int = 0
    summary_tokens: int = 0
    summary: Optional[Message] = field(default=None, repr=False)


class HistoryCompactor:
    """
    Summarize older conversation turns once history exceeds a token budget.

    History after compaction:
    ┌─────────────────────────────────────────────────────────────┐
    │ system message (if present)                                 │
    ├─────────────────────────────────────────────────────────────┤
    │ leading user messages                                       │
    ├─────────────────────────────────────────────────────────────┤
    │ summary: assistant message flagged as summary               │
    ├─────────────────────────────────────────────────────────────┤
    │ recent turn blocks, verbatim, within recent_budget          │
    └─────────────────────────────────────────────────────────────┘

    A previous summary and every older turn block are folded into the new
    summary. Tool calls stay paired with their tool responses.
    """

    def __init__(
        self,
        summarizer: Summarizer,
        counter: Counter | None = None,
        trigger_budget: int = 0,
        recent_budget: int = 0,
    ) -> None:
        """
        Initialize compactor.

        Args:
            summarizer: Callable taking the five rendered history sections
                and returning a message-like object with ``content``.
            counter: Callable returning one token count per message.
                Defaults to a tiktoken-backed TokenCounter.
            trigger_budget: Compact only when history exceeds this many tokens.
                Values <= 0 use DEFAULT_TRIGGER_BUDGET.
            recent_budget: Tokens of recent turns kept verbatim.
                Values <= 0 use DEFAULT_RECENT_BUDGET.
        """
        self._summarizer = summarizer
        self._counter: Counter = counter or TokenCounter().count_each
        self._trigger_budget = (
            trigger_budget if trigger_budget > 0 else DEFAULT_TRIGGER_BUDGET
        )
        self._recent_budget = (
            recent_budget if recent_budget > 0 else DEFAULT_RECENT_BUDGET
        )

    @property
    def trigger_budget(self) -> int:
        return self._trigger_budget

    @property
    def recent_budget(self) -> int:
        return self._recent_budget

    def count(self, messages: Sequence[Optional[Message]]) -> list[int]:
        """Per-message token counts, checked against the message count."""
        tokens = list(self._counter(messages))
        if len(tokens) != len(messages):
            raise CountMismatchError(len(messages), len(tokens))
        return tokens

    def should_compact(self, messages: Sequence[Optional[Message]]) -> bool:
        """Check if the history is over the trigger budget."""
        if not messages:
            return False
        return sum(self.count(messages)) > self._trigger_budget

    def get_current_usage(
        self, messages: Sequence[Optional[Message]]
    ) -> tuple[int, float]:
        """Get current token count and usage percentage of the trigger budget."""
        tokens = sum(self.count(messages)) if messages else 0
        return tokens, (tokens / self._trigger_budget) * 100

    def compact(self, messages: list[Optional[Message]]) -> list[Optional[Message]]:
        """
        Return the history to use for the next model call.

        Below the trigger budget the input list is returned as is. Otherwise
        a new list is built; the input is never mutated.

        Raises:
            CountMismatchError: Counter broke its length contract.
            SummarizationFailedError: Summarizer raised or returned no content.
        """
        return self.compact_with_result(messages).messages

    def compact_with_result(
        self, messages: list[Optional[Message]]
    ) -> CompactionResult:
        """Compact like ``compact`` and report what happened."""
        if not messages:
            return CompactionResult(
                messages=messages, compacted=False, initial_tokens=0, final_tokens=0
            )

        tokens = self.count(messages)
        total = sum(tokens)
        if total <= self._trigger_budget:
            LOGGER.debug(
                "Skipping compaction: %d tokens <= %d trigger",
                total,
                self._trigger_budget,
            )
            return CompactionResult(
                messages=messages,
                compacted=False,
                initial_tokens=total,
                final_tokens=total,
            )

        partition = partition_history(messages, tokens)
        older, recent = split_recent(partition.turns, self._recent_budget)

        LOGGER.info(
            "Compacting history: %d tokens > %d trigger "
            "(%d older blocks, %d recent blocks)",
            total,
            self._trigger_budget,
            len(older),
            len(recent),
        )

        fields = {
            "system_prompt": _render_blocks([partition.system]),
            "user_messages": _render_blocks([partition.user]),
            "previous_summary": _render_blocks([partition.summary]),
            "older_messages": _render_blocks(older),
            "recent_messages": _render_blocks(recent),
        }

        try:
            response = self._summarizer(fields)
            content = response.content
        except Exception as exc:
            LOGGER.warning("Summarization failed, history left unchanged: %s", exc)
            raise SummarizationFailedError(exc) from exc

        summary = Message(
            role=Role.ASSISTANT,
            content=content or "",
            name="summary",
            extra_flags={SUMMARY_FLAG: True},
        )

        new_messages: list[Optional[Message]] = []
        new_messages.extend(partition.system.messages)
        new_messages.extend(partition.user.messages)
        new_messages.append(summary)
        for block in recent:
            new_messages.extend(block.messages)

        final_tokens = (
            partition.system.tokens
            + partition.user.tokens
            + sum(block.tokens for block in recent)
        )
        summary_tokens = self.count([summary])[0]
        LOGGER.info(
            "Compaction: %d -> %d messages, %d -> %d tokens (+ %d summary)",
            len(messages),
            len(new_messages),
            total,
            final_tokens,
            summary_tokens,
        )

        return CompactionResult(
            messages=new_messages,
            compacted=True,
            initial_tokens=total,
            final_tokens=final_tokens,
            older_blocks=len(older),
            recent_blocks=len(recent),
            summary_tokens=summary_tokens,
            summary=summary,
        )


def _render_blocks(blocks: Sequence[Block]) -> str:
    return "".join(render_messages(block.messages) for block in blocks)

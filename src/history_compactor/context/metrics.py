"""Compaction metrics for observability."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from history_compactor.context.compactor import CompactionResult


@dataclass
class CompactionStats:
    """Aggregate compaction statistics across a run.

    Owned by the caller and passed around explicitly; the compactor itself
    keeps no state between calls.
    """

    total_checks: int = 0
    total_compactions: int = 0
    total_failures: int = 0
    total_tokens_saved: int = 0
    blocks_summarized: int = 0

    # Token totals seen at each check
    usage_samples: list[int] = field(default_factory=list)

    def record(self, result: CompactionResult) -> None:
        """Record the outcome of one compaction check."""
        self.total_checks += 1
        self.usage_samples.append(result.initial_tokens)
        if result.compacted:
            self.total_compactions += 1
            self.total_tokens_saved += (
                result.initial_tokens - result.final_tokens - result.summary_tokens
            )
            self.blocks_summarized += result.older_blocks

    def record_failure(self) -> None:
        """Record a failed summarization attempt."""
        self.total_checks += 1
        self.total_failures += 1

    @property
    def max_tokens_seen(self) -> int:
        """Largest history token total observed."""
        if not self.usage_samples:
            return 0
        return max(self.usage_samples)

    def summary(self) -> str:
        """Human-readable summary of compaction stats."""
        return (
            f"Checks: {self.total_checks} | "
            f"Compactions: {self.total_compactions} "
            f"(failed={self.total_failures}) | "
            f"Blocks summarized: {self.blocks_summarized} | "
            f"Tokens saved: {self.total_tokens_saved} | "
            f"Max tokens: {self.max_tokens_seen}"
        )

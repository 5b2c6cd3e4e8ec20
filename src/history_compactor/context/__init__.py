"""Context layer: token counting, history partitioning and compaction."""

from history_compactor.context.blocks import (
    SUMMARY_FLAG,
    Block,
    Partition,
    partition_history,
    split_recent,
)
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
from history_compactor.context.summarizer import HistorySummarizer
from history_compactor.context.token_counter import TokenCounter

__all__ = [
    # Blocks
    "SUMMARY_FLAG",
    "Block",
    "Partition",
    "partition_history",
    "split_recent",
    # Compactor
    "DEFAULT_RECENT_BUDGET",
    "DEFAULT_TRIGGER_BUDGET",
    "CompactionResult",
    "HistoryCompactor",
    # Exceptions
    "CompactionError",
    "CountMismatchError",
    "SummarizationFailedError",
    # Support
    "CompactionStats",
    "HistorySummarizer",
    "TokenCounter",
]

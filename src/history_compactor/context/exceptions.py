"""Compaction-specific exceptions."""

from __future__ import annotations


class CompactionError(Exception):
    """Base exception for history compaction."""


class CountMismatchError(CompactionError):
    """Token counter returned a different number of counts than messages."""

    def __init__(self, message_count: int, token_count: int) -> None:
        self.message_count = message_count
        self.token_count = token_count
        super().__init__(
            f"Token count mismatch: {message_count} messages, "
            f"{token_count} token counts"
        )


class SummarizationFailedError(CompactionError):
    """The summarizer raised or returned an unusable response.

    The history passed to the compactor is left untouched.
    """

    def __init__(self, original: BaseException) -> None:
        self.original = original
        super().__init__(f"Summarization failed: {original}")

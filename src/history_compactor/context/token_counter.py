"""Token counting with tiktoken primary, heuristic fallback."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import tiktoken

from history_compactor.context.rendering import render_for_count
from history_compactor.messages import Message

LOGGER = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"


class TokenCounter:
    """Token counting with tiktoken primary, heuristic fallback.

    ``count_each`` satisfies the compactor's counter contract: one
    non-negative count per message, same order, same length.
    """

    def __init__(
        self,
        encoding: str = DEFAULT_ENCODING,
        chars_per_token: float = 4.0,
    ) -> None:
        """
        Initialize token counter.

        Args:
            encoding: tiktoken encoding name. Loaded lazily on first count.
            chars_per_token: Fallback heuristic ratio.
        """
        self._encoding_name = encoding
        self._chars_per_token = chars_per_token
        self._encoder: tiktoken.Encoding | None = None
        self._using_fallback = False
        self._fallback_warned = False

    def count(self, text: str) -> int:
        """Count tokens in text. Falls back to heuristic on tokenizer failure."""
        if not text:
            return 0
        if self._using_fallback:
            return self._heuristic_count(text)

        try:
            if self._encoder is None:
                self._encoder = tiktoken.get_encoding(self._encoding_name)
            return len(self._encoder.encode(text, disallowed_special=()))
        except Exception as exc:
            if not self._fallback_warned:
                LOGGER.warning(
                    "tiktoken encoding %s failed, falling back to heuristic: %s",
                    self._encoding_name,
                    exc,
                )
                self._fallback_warned = True
            self._using_fallback = True
            return self._heuristic_count(text)

    def count_each(self, messages: Sequence[Optional[Message]]) -> list[int]:
        """Per-message token counts over the canonical count rendering."""
        return [self.count(render_for_count(m)) for m in messages]

    def count_messages(self, messages: Sequence[Optional[Message]]) -> int:
        """Total tokens for a message list."""
        return sum(self.count_each(messages))

    def __call__(self, messages: Sequence[Optional[Message]]) -> list[int]:
        return self.count_each(messages)

    @property
    def using_fallback(self) -> bool:
        """True if tiktoken failed and we're using heuristic."""
        return self._using_fallback

    def _heuristic_count(self, text: str) -> int:
        """Estimate token count from character count."""
        return max(1, int(len(text) / self._chars_per_token))

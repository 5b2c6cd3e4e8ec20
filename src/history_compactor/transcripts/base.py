"""Base exporter interface for conversation transcripts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional

from history_compactor.messages import Message


class TranscriptExporter(ABC):
    """Base class for transcript exporters."""

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension without dot (e.g., 'json', 'yaml')."""
        ...

    @abstractmethod
    def export(self, messages: Iterable[Optional[Message]], output_path: Path) -> int:
        """Export messages to file.

        Args:
            messages: Conversation history to export. None entries are skipped.
            output_path: Path to output file.

        Returns:
            Number of messages exported.
        """
        ...

    @staticmethod
    def build_document(messages: Iterable[Optional[Message]]) -> dict:
        """Wrap serialized messages with their count."""
        data = [m.to_dict() for m in messages if m is not None]
        return {"messages": data, "count": len(data)}

"""JSON exporter for conversation transcripts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Optional

from history_compactor.messages import Message
from history_compactor.transcripts.base import TranscriptExporter


class JsonTranscriptExporter(TranscriptExporter):
    """Export transcripts to JSON format."""

    @property
    def extension(self) -> str:
        return "json"

    def export(self, messages: Iterable[Optional[Message]], output_path: Path) -> int:
        output = self.build_document(messages)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2, ensure_ascii=False)
        return output["count"]

"""YAML exporter for conversation transcripts."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

import yaml

from history_compactor.messages import Message
from history_compactor.transcripts.base import TranscriptExporter


class YamlTranscriptExporter(TranscriptExporter):
    """Export transcripts to YAML format."""

    @property
    def extension(self) -> str:
        return "yaml"

    def export(self, messages: Iterable[Optional[Message]], output_path: Path) -> int:
        output = self.build_document(messages)
        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(output, f, allow_unicode=True, sort_keys=False)
        return output["count"]

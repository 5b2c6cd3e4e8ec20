"""Conversation transcript import/export for JSON and YAML formats."""

from history_compactor.transcripts.base import TranscriptExporter
from history_compactor.transcripts.exceptions import TranscriptError
from history_compactor.transcripts.json_exporter import JsonTranscriptExporter
from history_compactor.transcripts.loader import get_exporter, load_transcript
from history_compactor.transcripts.yaml_exporter import YamlTranscriptExporter

__all__ = [
    "TranscriptExporter",
    "TranscriptError",
    "JsonTranscriptExporter",
    "YamlTranscriptExporter",
    "get_exporter",
    "load_transcript",
]

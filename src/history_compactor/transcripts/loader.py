"""Transcript loading and exporter selection by file suffix."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import yaml

from history_compactor.messages import Message
from history_compactor.transcripts.base import TranscriptExporter
from history_compactor.transcripts.exceptions import TranscriptError
from history_compactor.transcripts.json_exporter import JsonTranscriptExporter
from history_compactor.transcripts.yaml_exporter import YamlTranscriptExporter

LOGGER = logging.getLogger(__name__)

_EXPORTERS: dict[str, type[TranscriptExporter]] = {
    ".json": JsonTranscriptExporter,
    ".yaml": YamlTranscriptExporter,
    ".yml": YamlTranscriptExporter,
}


def get_exporter(path: Path) -> TranscriptExporter:
    """Pick an exporter from the path suffix."""
    exporter_cls = _EXPORTERS.get(Path(path).suffix.lower())
    if exporter_cls is None:
        raise TranscriptError(f"Unsupported transcript format: {path}")
    return exporter_cls()


def load_transcript(path: Path) -> list[Message]:
    """
    Load a conversation history from JSON or YAML.

    Accepts either ``{"messages": [...]}`` or a bare list of message dicts.

    Raises:
        TranscriptError: Unsupported suffix, unreadable file or bad document.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in _EXPORTERS:
        raise TranscriptError(f"Unsupported transcript format: {path}")

    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text) if suffix == ".json" else yaml.safe_load(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise TranscriptError(f"Cannot read transcript {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("messages")
    if not isinstance(data, list):
        raise TranscriptError(f"Transcript {path} has no message list")

    messages = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise TranscriptError(f"Message {i} in {path} is not a mapping")
        try:
            messages.append(Message.from_dict(item))
        except ValueError as exc:
            raise TranscriptError(f"Message {i} in {path}: {exc}") from exc

    LOGGER.debug("Loaded %d messages from %s", len(messages), path)
    return messages

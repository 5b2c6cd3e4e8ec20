"""Transcript-specific exceptions."""


class TranscriptError(Exception):
    """Transcript file could not be read or written."""

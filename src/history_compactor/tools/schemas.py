"""OpenAI function calling schema definitions."""

from __future__ import annotations

REPEAT_SECTIONS_SCHEMA: dict = {
    "type": "function",
    "function": {
        "name": "repeat_sections",
        "description": "Repeat given paragraphs to quickly accumulate context.",
        "parameters": {
            "type": "object",
            "properties": {
                "title": {
                    "type": "string",
                    "description": "Section title",
                },
                "paragraphs": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Paragraphs to be repeated",
                },
                "repeat_count": {
                    "type": "integer",
                    "description": "Times to repeat paragraphs (default: 2)",
                },
            },
            "required": ["title", "paragraphs"],
        },
    },
}


def get_tool_schemas() -> list[dict]:
    """Return all built-in tool schemas."""
    return [REPEAT_SECTIONS_SCHEMA]

"""Section tools for long-form writing runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from history_compactor.tools.exceptions import ToolValidationError

if TYPE_CHECKING:
    from history_compactor.state import RunState

DEFAULT_REPEAT_COUNT = 2


def repeat_sections(args: dict, state: RunState) -> str:
    """Number and repeat paragraphs under a markdown heading.

    Appends the running tool call count taken from ``state``.

    Raises:
        ToolValidationError: Missing title or paragraphs not a list.
    """
    title = args.get("title")
    paragraphs = args.get("paragraphs")
    if not isinstance(title, str):
        raise ToolValidationError("'title' must be a string")
    if not isinstance(paragraphs, list):
        raise ToolValidationError("'paragraphs' must be a list of strings")

    repeat_count = args.get("repeat_count") or 0
    if not isinstance(repeat_count, int) or repeat_count <= 0:
        repeat_count = DEFAULT_REPEAT_COUNT

    lines = [f"## {title}"]
    idx = 0
    for _ in range(repeat_count):
        for paragraph in paragraphs:
            idx += 1
            lines.append(f"{idx}. {paragraph}")

    calls = state.record_tool_call()
    lines.append(f"Tool calls so far: {calls}")
    return "\n".join(lines)

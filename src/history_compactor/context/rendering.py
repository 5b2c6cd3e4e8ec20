"""Plain-text rendering of messages for summarization and token counting."""

from __future__ import annotations

from typing import Iterable, Optional

from history_compactor.messages import Message, Role


def _text_parts(message: Message) -> list[str]:
    return [part.text for part in message.parts if part.type == "text" and part.text]


def render_message(message: Optional[Message]) -> str:
    """Render one message for the summarizer.

    Layout:
        [role] or [tool:name]
        content
        tool_call: name / args: arguments   (assistant tool calls)
        text parts of multimodal content
    """
    if message is None:
        return ""

    lines: list[str] = []
    if message.role is Role.TOOL:
        lines.append(f"[tool:{message.name}]" if message.name else "[tool]")
    else:
        lines.append(f"[{message.role.value}]")

    if message.content:
        lines.append(message.content)

    if message.role is Role.ASSISTANT:
        for call in message.tool_calls:
            if call.name:
                lines.append(f"tool_call: {call.name}")
            if call.arguments:
                lines.append(f"args: {call.arguments}")

    lines.extend(_text_parts(message))
    return "".join(line + "\n" for line in lines)


def render_messages(messages: Iterable[Optional[Message]]) -> str:
    """Render messages in order, each followed by a blank separator line."""
    return "".join(render_message(m) + "\n" for m in messages)


def render_for_count(message: Optional[Message]) -> str:
    """Canonical text fed to the tokenizer: role, content, text parts, tool calls."""
    if message is None:
        return ""

    lines = [message.role.value]
    if message.content:
        lines.append(message.content)
    lines.extend(_text_parts(message))
    for call in message.tool_calls:
        if call.name:
            lines.append(call.name)
        if call.arguments:
            lines.append(call.arguments)
    return "".join(line + "\n" for line in lines)

"""Tool result dataclass."""

from __future__ import annotations

from dataclasses import dataclass

from history_compactor.messages import Message


@dataclass
class ToolResult:
    """Result from a tool execution."""

    tool_name: str
    call_id: str
    success: bool
    result: str
    error: str | None = None

    def to_message(self) -> Message:
        """Tool message answering the originating call."""
        return Message.tool(self.result, tool_call_id=self.call_id, name=self.tool_name)

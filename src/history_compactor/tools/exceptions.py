"""Tool-specific exceptions."""

from __future__ import annotations


class ToolError(Exception):
    """Base exception for tool operations."""

    code = "TOOL_ERROR"


class ToolNotFoundError(ToolError):
    """No handler registered under the requested name."""

    code = "UNKNOWN_TOOL"

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class ToolValidationError(ToolError):
    """Tool arguments were not valid JSON or failed validation."""

    code = "INVALID_ARGUMENTS"


class ToolExecutionError(ToolError):
    """Handler raised while running."""

    code = "EXECUTION_FAILED"

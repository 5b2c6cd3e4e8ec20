"""Tool layer for agent runs.

This module provides:
- ToolDispatcher: Routes tool calls to handlers
- ToolResult: Result dataclass for tool execution
- Tool exceptions for error handling
- OpenAI function calling schemas
"""

from __future__ import annotations

from history_compactor.tools.dispatcher import ToolDispatcher
from history_compactor.tools.exceptions import (
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolValidationError,
)
from history_compactor.tools.result import ToolResult
from history_compactor.tools.schemas import get_tool_schemas

__all__ = [
    "ToolDispatcher",
    "ToolResult",
    "ToolError",
    "ToolNotFoundError",
    "ToolValidationError",
    "ToolExecutionError",
    "get_tool_schemas",
]

"""Tool dispatcher for routing tool calls to implementations."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Callable

from history_compactor.tools.exceptions import (
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolValidationError,
)
from history_compactor.tools.result import ToolResult
from history_compactor.tools.schemas import REPEAT_SECTIONS_SCHEMA
from history_compactor.tools.section_tools import repeat_sections

LOGGER = logging.getLogger(__name__)

if TYPE_CHECKING:
    from history_compactor.messages import ToolCall
    from history_compactor.state import RunState

ToolHandler = Callable[[dict, "RunState"], str]


def format_error(message: str, code: str) -> str:
    """Error payload returned to the model in place of a tool result."""
    return json.dumps({"error": message, "code": code})


class ToolDispatcher:
    """Route tool calls to registered handlers."""

    def __init__(self, include_builtins: bool = True) -> None:
        """
        Initialize dispatcher.

        Args:
            include_builtins: Register repeat_sections.
        """
        # Tool name -> (handler, OpenAI schema)
        self._handlers: dict[str, tuple[ToolHandler, dict]] = {}
        if include_builtins:
            self.register(repeat_sections, REPEAT_SECTIONS_SCHEMA)

    def register(self, handler: ToolHandler, schema: dict) -> None:
        """Register a handler under the function name in its schema."""
        name = schema["function"]["name"]
        if name in self._handlers:
            LOGGER.warning("Replacing tool handler: %s", name)
        self._handlers[name] = (handler, schema)

    def get_handler(self, tool_name: str) -> ToolHandler:
        entry = self._handlers.get(tool_name)
        if entry is None:
            raise ToolNotFoundError(tool_name)
        return entry[0]

    def get_tool_definitions(self) -> list[dict]:
        """Return OpenAI function calling schemas."""
        return [schema for _, schema in self._handlers.values()]

    def dispatch(self, tool_call: ToolCall, state: RunState) -> ToolResult:
        """
        Execute tool call.

        Errors never escape; they come back as unsuccessful results whose
        ``result`` is a JSON error payload for the model.
        """
        LOGGER.info("Tool call: %s (id=%s)", tool_call.name, tool_call.id)

        try:
            handler = self.get_handler(tool_call.name)
            args = self._parse_arguments(tool_call.arguments)
            try:
                result = handler(args, state)
            except ToolError:
                raise
            except Exception as exc:
                raise ToolExecutionError(str(exc)) from exc
        except ToolError as exc:
            LOGGER.warning("Tool error: %s code=%s: %s", tool_call.name, exc.code, exc)
            return ToolResult(
                tool_name=tool_call.name,
                call_id=tool_call.id,
                success=False,
                result=format_error(str(exc), code=exc.code),
                error=str(exc),
            )

        LOGGER.debug("Tool success: %s", tool_call.name)
        return ToolResult(
            tool_name=tool_call.name,
            call_id=tool_call.id,
            success=True,
            result=result,
        )

    @staticmethod
    def _parse_arguments(arguments: str) -> dict:
        if not arguments:
            return {}
        try:
            args = json.loads(arguments)
        except json.JSONDecodeError as exc:
            raise ToolValidationError(f"Invalid JSON arguments: {exc}") from exc
        if not isinstance(args, dict):
            raise ToolValidationError("Arguments must be a JSON object")
        return args

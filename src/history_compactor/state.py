"""Per-run state passed explicitly between the runner and tool handlers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RunState:
    """Mutable state for a single agent run.

    Tool handlers receive this object instead of reading session globals.
    """

    tool_calls: int = 0
    iterations: int = 0
    values: dict = field(default_factory=dict)

    def record_tool_call(self) -> int:
        """Increment and return the tool call count."""
        self.tool_calls += 1
        return self.tool_calls

    def to_dict(self) -> dict:
        return {
            "tool_calls": self.tool_calls,
            "iterations": self.iterations,
            "values": dict(self.values),
        }

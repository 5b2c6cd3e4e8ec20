"""Conversation message model shared by the compactor, runner and transcripts."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class Role(str, Enum):
    """Closed set of conversation roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolCall:
    """A function call requested by an assistant message."""

    id: str
    name: str
    arguments: str = ""

    def to_dict(self) -> dict:
        """Serialize to OpenAI tool-call format."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToolCall:
        """Reconstruct from OpenAI tool-call format."""
        func = data.get("function") or {}
        return cls(
            id=data.get("id") or "",
            name=func.get("name") or "",
            arguments=func.get("arguments") or "",
        )


@dataclass(frozen=True)
class ContentPart:
    """One part of multimodal content.

    ``type`` and ``text`` are what rendering and counting read. ``data``
    holds the part exactly as it was loaded (image URLs, audio payloads)
    and is written back unchanged.
    """

    type: str
    text: str = ""
    data: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def to_dict(self) -> dict:
        if self.data:
            return copy.deepcopy(dict(self.data))
        if self.type == "text":
            return {"type": "text", "text": self.text}
        return {"type": self.type}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ContentPart:
        return cls(
            type=data.get("type") or "text",
            text=data.get("text") or "",
            data=copy.deepcopy(dict(data)),
        )


@dataclass(frozen=True)
class Message:
    """A single conversation turn.

    Messages are immutable; history rewrites build new lists instead of
    editing messages in place. ``extra_flags`` is stored as a read-only
    mapping so a summary marker cannot be dropped after construction.

    Content is either plain text or a list of parts, never both.
    """

    role: Role
    content: str = ""
    tool_calls: tuple[ToolCall, ...] = ()
    tool_call_id: str = ""
    name: str = ""
    parts: tuple[ContentPart, ...] = ()
    extra_flags: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if self.content and self.parts:
            raise ValueError("Message content and parts are mutually exclusive")
        object.__setattr__(self, "tool_calls", tuple(self.tool_calls))
        object.__setattr__(self, "parts", tuple(self.parts))
        object.__setattr__(
            self, "extra_flags", MappingProxyType(dict(self.extra_flags))
        )

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(
        cls,
        content: str = "",
        tool_calls: list[ToolCall] | tuple[ToolCall, ...] = (),
    ) -> Message:
        return cls(role=Role.ASSISTANT, content=content, tool_calls=tuple(tool_calls))

    @classmethod
    def tool(cls, content: str, tool_call_id: str = "", name: str = "") -> Message:
        return cls(
            role=Role.TOOL, content=content, tool_call_id=tool_call_id, name=name
        )

    def has_flag(self, flag: str) -> bool:
        """True if the flag key is present in extra_flags."""
        return flag in self.extra_flags

    def to_dict(self) -> dict:
        """Serialize to an OpenAI-style chat message dict.

        Multimodal parts are written as a content list, each part in the
        form it was loaded. Extra flags are kept under an ``extra`` key so
        transcripts round-trip summary markers.
        """
        data: dict[str, Any] = {"role": self.role.value}
        if self.parts:
            data["content"] = [part.to_dict() for part in self.parts]
        else:
            data["content"] = self.content
        if self.tool_calls:
            data["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        if self.tool_call_id:
            data["tool_call_id"] = self.tool_call_id
        if self.name:
            data["name"] = self.name
        if self.extra_flags:
            data["extra"] = dict(self.extra_flags)
        return data

    def to_api_dict(self) -> dict:
        """Serialize for a chat-completions request (no local flags)."""
        data = self.to_dict()
        data.pop("extra", None)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Message:
        """Reconstruct from an OpenAI-style chat message dict.

        Raises:
            ValueError: If the role is missing or not a known role.
        """
        role = Role(data.get("role"))
        raw_content = data.get("content")
        content = ""
        parts: tuple[ContentPart, ...] = ()
        if isinstance(raw_content, list):
            parts = tuple(ContentPart.from_dict(p) for p in raw_content)
        elif raw_content:
            content = str(raw_content)
        return cls(
            role=role,
            content=content,
            tool_calls=tuple(
                ToolCall.from_dict(tc) for tc in data.get("tool_calls") or []
            ),
            tool_call_id=data.get("tool_call_id") or "",
            name=data.get("name") or "",
            parts=parts,
            extra_flags=dict(data.get("extra") or {}),
        )

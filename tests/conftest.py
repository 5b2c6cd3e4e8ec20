"""Shared pytest fixtures for history-compactor tests."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from history_compactor.agent_client import AgentClient
from history_compactor.messages import Message, ToolCall


@pytest.fixture(scope="session")
def agent_available() -> bool:
    """Check if a chat-completions server is running on port 8080.

    This fixture runs once per test session and caches the result.
    Used by integration tests to skip gracefully when the agent is unavailable.
    """
    client = AgentClient(base_url="http://localhost:8080", timeout=5)
    return client.health_check()


@pytest.fixture
def real_agent(agent_available: bool) -> AgentClient:
    """Get real AgentClient, skip if agent unavailable."""
    if not agent_available:
        pytest.skip("chat-completions server not running on localhost:8080")
    return AgentClient(base_url="http://localhost:8080", timeout=120)


@pytest.fixture
def summarizer():
    """Summarizer mock returning a fixed summary message."""
    return Mock(return_value=Message.assistant("Summary of earlier work."))


@pytest.fixture
def scenario_history() -> list[Message]:
    """System, user, tool-call turn with two responses, then chat turns."""
    return [
        Message.system("You are a report writer."),
        Message.user("Write a long report."),
        Message.assistant(
            "",
            tool_calls=[
                ToolCall(id="a", name="repeat_sections", arguments='{"title": "A"}'),
                ToolCall(id="b", name="repeat_sections", arguments='{"title": "B"}'),
            ],
        ),
        Message.tool("## A", tool_call_id="a", name="repeat_sections"),
        Message.tool("## B", tool_call_id="b", name="repeat_sections"),
        Message.assistant("Draft done."),
        Message.user("Add a conclusion."),
        Message.assistant("Conclusion added."),
    ]

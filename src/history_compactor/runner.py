"""Agent turn loop that compacts history before every model call."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .agent_client import AgentClient, AgentClientError
from .context import (
    CompactionStats,
    HistoryCompactor,
    HistorySummarizer,
    SummarizationFailedError,
    TokenCounter,
)
from .messages import Message, Role
from .state import RunState
from .tools import ToolDispatcher

LOGGER = logging.getLogger("history_compactor.runner")


@dataclass
class RunnerConfig:
    agent_url: str = "http://localhost:8080"
    api_key: Optional[str] = None
    model: Optional[str] = None
    temperature: float = 0.4
    max_tokens: int = 1024
    timeout: int = 120
    max_iterations: int = 30
    trigger_budget: int = 10 * 1024
    recent_budget: int = 2 * 1024
    encoding: str = "cl100k_base"
    summary_max_tokens: int = 1024
    summary_temperature: float = 0.3
    summary_prompt: Optional[str] = None


@dataclass
class RunResult:
    """Outcome of one agent run."""

    messages: list[Message]
    iterations: int = 0
    completed: bool = False
    error: Optional[str] = None
    state: RunState = field(default_factory=RunState)
    stats: CompactionStats = field(default_factory=CompactionStats)

    @property
    def final_message(self) -> Optional[Message]:
        """Last assistant message, if any."""
        for message in reversed(self.messages):
            if message is not None and message.role is Role.ASSISTANT:
                return message
        return None


class ConversationRunner:
    """Drives chat-completion turns with tool execution and compaction."""

    def __init__(
        self,
        config: RunnerConfig,
        agent: Optional[AgentClient] = None,
        compactor: Optional[HistoryCompactor] = None,
        dispatcher: Optional[ToolDispatcher] = None,
    ):
        self.config = config
        self.agent = agent or AgentClient(
            base_url=config.agent_url,
            api_key=config.api_key,
            model=config.model,
            timeout=config.timeout,
        )
        self.compactor = compactor or HistoryCompactor(
            summarizer=HistorySummarizer(
                self.agent,
                system_prompt=config.summary_prompt,
                max_tokens=config.summary_max_tokens,
                temperature=config.summary_temperature,
            ),
            counter=TokenCounter(encoding=config.encoding).count_each,
            trigger_budget=config.trigger_budget,
            recent_budget=config.recent_budget,
        )
        self.dispatcher = dispatcher or ToolDispatcher()

    def run(self, messages: list[Message], state: Optional[RunState] = None) -> RunResult:
        """
        Run the agent until it answers without tool calls.

        History is compacted before each model call. A failed summary or
        agent call ends the run with the last good history and ``error`` set.
        CountMismatchError propagates.
        """
        history = list(messages)
        result = RunResult(messages=history, state=state or RunState())
        tools = self.dispatcher.get_tool_definitions()
        LOGGER.info(
            "Starting agent run (%d messages, max_iterations=%d)",
            len(history),
            self.config.max_iterations,
        )

        while result.iterations < self.config.max_iterations:
            try:
                compaction = self.compactor.compact_with_result(history)
            except SummarizationFailedError as exc:
                LOGGER.error("Compaction failed: %s", exc)
                result.stats.record_failure()
                result.error = str(exc)
                break
            result.stats.record(compaction)
            history = compaction.messages

            try:
                response = self.agent.chat(
                    messages=[m.to_api_dict() for m in history if m is not None],
                    temperature=self.config.temperature,
                    max_tokens=self.config.max_tokens,
                    tools=tools or None,
                )
            except AgentClientError as exc:
                LOGGER.error("Agent call failed: %s", exc)
                result.error = str(exc)
                break

            result.iterations += 1
            result.state.iterations += 1
            reply = Message.from_dict({**response.message, "role": "assistant"})
            history = history + [reply]

            if not reply.tool_calls:
                result.completed = True
                break

            for call in reply.tool_calls:
                tool_result = self.dispatcher.dispatch(call, result.state)
                history.append(tool_result.to_message())
        else:
            LOGGER.warning(
                "Agent run stopped after %d iterations", self.config.max_iterations
            )

        result.messages = history
        LOGGER.info(
            "Agent run finished: %d iterations, completed=%s | %s",
            result.iterations,
            result.completed,
            result.stats.summary(),
        )
        return result

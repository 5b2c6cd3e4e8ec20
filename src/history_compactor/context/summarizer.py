"""History summarization via the chat-completions agent."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from history_compactor.agent_client import AgentClientError
from history_compactor.context.prompts import SUMMARY_REQUEST, SUMMARY_SYSTEM_PROMPT
from history_compactor.messages import Message

if TYPE_CHECKING:
    from history_compactor.agent_client import AgentClient

LOGGER = logging.getLogger(__name__)

SUMMARY_FIELDS = (
    "system_prompt",
    "user_messages",
    "previous_summary",
    "older_messages",
    "recent_messages",
)


class HistorySummarizer:
    """Turns rendered history sections into a single summary message.

    Instances are callable and plug straight into HistoryCompactor.
    Failures are not caught here; the compactor reports them.
    """

    def __init__(
        self,
        agent_client: AgentClient,
        system_prompt: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.3,
        model: str | None = None,
    ) -> None:
        """
        Initialize history summarizer.

        Args:
            agent_client: Agent for generating summaries.
            system_prompt: Template with the five section placeholders.
                Empty or None uses SUMMARY_SYSTEM_PROMPT.
            max_tokens: Max tokens for summary response.
            temperature: Sampling temperature for the summary call.
            model: Optional model override for the summary call.
        """
        self.agent = agent_client
        self.system_prompt = system_prompt or SUMMARY_SYSTEM_PROMPT
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.model = model

    def build_messages(self, fields: Mapping[str, str]) -> list[dict]:
        """Build messages for the summarization request."""
        values = {name: fields.get(name, "") for name in SUMMARY_FIELDS}
        return [
            {"role": "system", "content": self.system_prompt.format(**values)},
            {"role": "user", "content": SUMMARY_REQUEST},
        ]

    def __call__(self, fields: Mapping[str, str]) -> Message:
        """Summarize the rendered history sections.

        Raises:
            AgentClientError: Request failed or the reply had no content.
        """
        LOGGER.debug(
            "Summarizing %d chars of older messages",
            len(fields.get("older_messages", "")),
        )
        response = self.agent.chat(
            messages=self.build_messages(fields),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            model=self.model,
        )
        content = (response.message.get("content") or "").strip()
        if not content:
            raise AgentClientError("Summary response had no content")
        return Message.assistant(content)
